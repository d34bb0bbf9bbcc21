"""
Health check endpoints
"""

from fastapi import APIRouter, Depends

from ..auth import AuthContext, require_secret_key

router = APIRouter()


@router.get("/health")
def health(_ctx: AuthContext = Depends(require_secret_key)):
    """Authenticated liveness check; doubles as a way to test a secret key"""
    return {"status": "Ok"}


# Unauthenticated probe for docker/kube HEALTHCHECKs
@router.get("/healthz", include_in_schema=False)
def healthz():
    return {"status": "ok"}
