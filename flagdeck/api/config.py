"""
Runtime config reads, authenticated with a project API key
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..auth import AuthContext, require_public_key, require_secret_key
from ..db import get_db
from ..errors import ApiError, internal_error
from ..services.configs import ConfigService
from ..services.value_parser import parse_value

router = APIRouter(tags=["Config"])


def _as_mapping(records) -> dict:
    return {r.name: parse_value(r.value, r.value_type) for r in records}


@router.get("/config")
def get_configs(
    request: Request,
    ctx: AuthContext = Depends(require_secret_key),
    db: Session = Depends(get_db),
):
    """All configs of the key's project as ``{name: value}``"""
    try:
        return _as_mapping(ConfigService.list_configs(db, ctx.project_id, ctx.tenant_id))
    except ApiError:
        raise
    except Exception as exc:
        raise internal_error(exc, "get_configs_error", request) from exc


@router.get("/public/config")
def get_public_configs(
    request: Request,
    ctx: AuthContext = Depends(require_public_key),
    db: Session = Depends(get_db),
):
    """Only configs flagged public"""
    try:
        return _as_mapping(ConfigService.list_configs(db, ctx.project_id, ctx.tenant_id, public_only=True))
    except ApiError:
        raise
    except Exception as exc:
        raise internal_error(exc, "get_public_configs_error", request) from exc
