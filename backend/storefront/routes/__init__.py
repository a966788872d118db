# Routes package init
"""
Storefront Backend: API Routes Package
=========================================

Route Inventory:
    - products.py: GET    /api/products            (list, public)
                   GET    /api/products/{id}       (detail, public)
                   POST   /api/products            (admin)
                   PUT    /api/products/{id}       (admin)
                   DELETE /api/products/{id}       (admin)
    - upload.py:   POST   /api/upload              (admin)
                   DELETE /api/upload/{public_id}  (admin)
                   GET    /api/files/{path}        (stored images)
    - health.py:   GET    /health

Routes stay thin: extract request data, call a service, shape the response.
"""
