"""Service-role maintenance endpoints."""

from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from intent.config import get_settings
from intent.dependencies import get_db
from intent.maintenance.nonce_cleanup import cleanup_expired_nonces

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/admin", tags=["Maintenance"])


def _is_service_role(authorization: str | None) -> bool:
    key = get_settings().service_role_key
    if not key or not authorization:
        return False
    return hmac.compare_digest(authorization, f"Bearer {key}")


@router.post("/cleanup-nonces")
async def cleanup_nonces(
    authorization: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Delete expired sign-in nonces. Requires the service role key."""
    if not _is_service_role(authorization):
        logger.warning("Unauthorized nonce cleanup attempt")
        return JSONResponse(status_code=401, content={"error": "Authentication required"})

    try:
        report = await cleanup_expired_nonces(db)
    except SQLAlchemyError:
        logger.exception("Nonce cleanup failed")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to cleanup nonces"},
        )

    return {
        "success": True,
        "deleted": report.deleted,
        "remaining": report.remaining,
        "cleanedAt": report.cleaned_at.isoformat(),
    }
