"""Audit trail helper used by the API endpoints."""

from typing import Optional, Dict, Any
from fastapi import Request
from sqlalchemy.orm import Session

from worktime.models.audit_log import AuditLog


def get_client_ip(request: Optional[Request]) -> Optional[str]:
    """
    Client address, preferring reverse proxy headers.

    Order: first entry of X-Forwarded-For, then X-Real-IP, then the peer
    address of the connection.
    """
    if request is None:
        return None
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()
        if client_ip:
            return client_ip

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def create_audit_log(
    db: Session,
    request: Optional[Request],
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[Any] = None,
    user: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Record one audit entry and commit it.

    Args:
        db: Database session
        request: Incoming request, used for client IP and user agent
        action: e.g. 'session_started', 'login_failed', 'project_updated'
        entity_type: 'session', 'user', 'project', 'cost_center'
        entity_id: Identifier of the affected entity
        user: Username of whoever performed the action
        details: Extra JSON context
    """
    audit_log = AuditLog(
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        user=user,
        details=details,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("User-Agent") if request is not None else None,
    )

    db.add(audit_log)
    db.commit()
    db.refresh(audit_log)

    return audit_log
