"""
Runtime feature flag resolution.

Callers name the flags they want (``names=a,b`` or repeated ``name=``/``names=``
params) and optionally describe the subject with ``userId``, ``userRole`` and
``userAccountId``. The response maps each resolved name to its typed value;
names with no matching variant are omitted.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ..auth import AuthContext, require_public_key, require_secret_key
from ..db import get_db
from ..errors import ApiError, ValidationError, internal_error
from ..schemas.feature_flag import FlagQuery
from ..services.feature_flags import FeatureFlagService
from ..services.value_parser import parse_value

router = APIRouter(tags=["Feature flags"])


def flag_query(
    names: Optional[List[str]] = Query(None, description="Comma-separated flag names; may repeat"),
    name: Optional[List[str]] = Query(None, description="Single flag name; may repeat"),
    user_id: Optional[str] = Query(None, alias="userId"),
    user_role: Optional[str] = Query(None, alias="userRole"),
    user_account_id: Optional[str] = Query(None, alias="userAccountId"),
) -> FlagQuery:
    requested = []
    for value in (names or []) + (name or []):
        requested.extend(part.strip() for part in value.split(","))
    requested = [n for n in requested if n]
    if not requested:
        raise ValidationError(details="names: at least one feature flag name is required")

    # Empty dimensions behave as if they were not sent
    return FlagQuery(
        names=requested,
        user_id=user_id or None,
        user_role=user_role or None,
        user_account_id=user_account_id or None,
    )


def _resolve(db: Session, ctx: AuthContext, query: FlagQuery, public_only: bool) -> dict:
    resolved = FeatureFlagService.resolve(
        db,
        ctx.project_id,
        ctx.tenant_id,
        query.names,
        user_id=query.user_id,
        user_role=query.user_role,
        user_account_id=query.user_account_id,
        public_only=public_only,
    )
    return {flag.name: parse_value(flag.value, flag.value_type) for flag in resolved}


@router.get("/feature-flags")
def get_feature_flags(
    request: Request,
    ctx: AuthContext = Depends(require_secret_key),
    query: FlagQuery = Depends(flag_query),
    db: Session = Depends(get_db),
):
    try:
        return _resolve(db, ctx, query, public_only=False)
    except ApiError:
        raise
    except Exception as exc:
        raise internal_error(exc, "get_feature_flags_error", request) from exc


@router.get("/public/feature-flags")
def get_public_feature_flags(
    request: Request,
    ctx: AuthContext = Depends(require_public_key),
    query: FlagQuery = Depends(flag_query),
    db: Session = Depends(get_db),
):
    """Same cascade, restricted to variants flagged public"""
    try:
        return _resolve(db, ctx, query, public_only=True)
    except ApiError:
        raise
    except Exception as exc:
        raise internal_error(exc, "get_public_feature_flags_error", request) from exc
