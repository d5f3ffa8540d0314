"""
Tenant document schemas.
"""
from datetime import datetime
from typing import Any

from shopcore.schemas.common import BaseSchema


class DocumentWrite(BaseSchema):
    """Body of a document save; ``data`` is replaced wholesale."""

    data: Any = None


class DocumentResponse(BaseSchema):
    """A stored document. ``version`` is 0 and ``data`` null when absent."""

    key: str
    data: Any = None
    version: int = 0
    updated_at: datetime | None = None


class DocumentKeysResponse(BaseSchema):
    keys: list[str]


class BootstrapResponse(BaseSchema):
    """Several documents fetched in one round trip."""

    tenant_id: str
    data: dict[str, Any]
