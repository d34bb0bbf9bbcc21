from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import NotFoundError, ValidationError
from ..models.tenant import Tenant
from .deps import require_admin


def require_tenant(
    request: Request,
    x_tenant_id: Optional[str] = Header(None),
    _admin: str = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Tenant:
    """Resolve the tenant a management request acts on from X-Tenant-ID"""
    if not x_tenant_id:
        raise ValidationError(details="X-Tenant-ID header is required")
    try:
        tenant_id = int(x_tenant_id)
    except ValueError:
        raise ValidationError(details="X-Tenant-ID must be an integer")

    tenant = db.get(Tenant, tenant_id)
    if tenant is None or not tenant.is_active:
        raise NotFoundError("Tenant not found")

    # Stash for downstream logging
    request.state.tenant_id = tenant.id
    return tenant
