"""
Audit trigger points.

Records go to the ``shopcore.audit`` logger; shipping and storing them is
left to whatever handler the deployment attaches.
"""
import logging
from typing import Any

audit_logger = logging.getLogger("shopcore.audit")


def record_audit_event(
    action: str,
    resource_type: str,
    resource_id: Any = None,
    actor: Any = None,
    status: str = "success",
    **details: Any,
) -> None:
    """Emit one audit record."""
    audit_logger.info(
        "%s %s %s",
        action,
        resource_type,
        resource_id,
        extra={
            "audit": {
                "action": action,
                "resource_type": resource_type,
                "resource_id": str(resource_id) if resource_id is not None else None,
                "actor": str(actor) if actor is not None else None,
                "status": status,
                "details": details,
            }
        },
    )
