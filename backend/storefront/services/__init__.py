# Services package init
"""
Storefront Backend: Services Layer
=====================================

What:  Business logic between routes (HTTP) and collaborators (DB, storage, SMTP).

Service Inventory:
    - ProductService: Product catalogue CRUD
    - ObjectStorage (abstract) / LocalObjectStorage: image storage collaborator
    - UploadService: Upload validation, temp-file handling, storage hand-off
    - EmailService: Verification and password-reset emails with console fallback
"""
