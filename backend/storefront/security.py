"""
Storefront Backend: Admin Access Dependency
==============================================

What:  FastAPI dependency guarding catalogue and upload mutations.
How:   Compares the X-Admin-Key header with settings.admin_api_key.

Usage:
    @router.post("/products", dependencies=[Depends(require_admin)])
    async def create_product(...): ...

Responses:
    header missing               → 401 (AuthenticationError)
    key wrong / none configured  → 403 (PermissionDeniedError)
"""

import hmac
import logging
from typing import Optional

from fastapi import Header

from storefront.config import settings
from storefront.exceptions import AuthenticationError, PermissionDeniedError

logger = logging.getLogger(__name__)


async def require_admin(
    x_admin_key: Optional[str] = Header(default=None, alias="X-Admin-Key"),
) -> None:
    if not x_admin_key:
        raise AuthenticationError(message="Not authorized, no admin key provided")

    expected = settings.admin_api_key
    if not expected:
        logger.warning("Admin request rejected: ADMIN_API_KEY is not configured")
        raise PermissionDeniedError()

    if not hmac.compare_digest(x_admin_key.encode(), expected.encode()):
        raise PermissionDeniedError()
