"""Administrative endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Query

from src.api.dependencies.common import get_audit_logger
from src.middleware.auth import require_role
from src.models.account import Role
from src.schemas.music import AuditLogResponse
from src.services.audit_logger import AuditLogger

router = APIRouter()


@router.get(
    "/logs",
    response_model=List[AuditLogResponse],
    dependencies=[Depends(require_role(Role.ADMIN))],
)
async def audit_logs(
    limit: int = Query(100, ge=1, le=500, description="Maximum entries to return"),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Most recent audit entries (Admin only)."""
    rows = await audit.recent_entries(limit=limit)
    return [
        AuditLogResponse(
            id=row.AuditLogEntry.id,
            account_id=row.AuditLogEntry.account_id,
            username=row.username,
            action=row.AuditLogEntry.action,
            origin_address=row.AuditLogEntry.origin_address,
            timestamp=row.AuditLogEntry.created_at,
        )
        for row in rows
    ]
