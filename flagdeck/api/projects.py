"""
Project management endpoints: API keys, configs and feature flags.

All routes require an admin token and act on the tenant named by X-Tenant-ID.
The project in the path must belong to that tenant, otherwise 404.
"""
from fastapi import APIRouter, Depends, Path, Request
from sqlalchemy.orm import Session

from ..auth import require_tenant
from ..auth.keys import public_form
from ..db import get_db
from ..errors import ApiError, NotFoundError, internal_error
from ..models.apikey import KEY_CLASS_PUBLIC
from ..models.project import Project
from ..models.tenant import Tenant
from ..schemas.apikey import ApiKeyCreate, ApiKeyCreated, ApiKeyListResponse, ApiKeyOut
from ..schemas.config_record import ConfigCreate, ConfigListResponse, ConfigResponse, ConfigUpdate
from ..schemas.feature_flag import (
    FeatureFlagCreate, FeatureFlagListResponse, FeatureFlagResponse, FeatureFlagUpdate
)
from ..services.api_keys import ApiKeyService
from ..services.configs import ConfigService
from ..services.feature_flags import FeatureFlagService
from ..services.tenants import TenantService

router = APIRouter(prefix="/projects/{project_id}", tags=["Projects"])


def project_scope(
    project_id: int = Path(..., description="Project ID"),
    tenant: Tenant = Depends(require_tenant),
    db: Session = Depends(get_db),
) -> Project:
    return TenantService.get_project(db, project_id, tenant.id)


def _guard(event: str, request: Request, fn, *args, **kwargs):
    """Run a service call, turning unexpected failures into a logged 500"""
    try:
        return fn(*args, **kwargs)
    except ApiError:
        raise
    except Exception as exc:
        raise internal_error(exc, event, request) from exc


# ---- API keys ----

@router.post("/api-keys", response_model=ApiKeyCreated, status_code=201)
def create_api_key(
    data: ApiKeyCreate,
    request: Request,
    project: Project = Depends(project_scope),
    db: Session = Depends(get_db),
):
    """Issue a key; the full key is only returned here"""
    record, full_key = _guard("create_api_key_error", request, ApiKeyService.create_key,
                              db, project.id, project.tenant_id, data.type)
    return ApiKeyCreated(
        message="API key created",
        api_key=ApiKeyOut.model_validate(record),
        full_key=full_key,
        public_key=public_form(record.public_part) if record.key_class == KEY_CLASS_PUBLIC else None,
    )


@router.get("/api-keys", response_model=ApiKeyListResponse)
def list_api_keys(request: Request, project: Project = Depends(project_scope), db: Session = Depends(get_db)):
    keys = _guard("get_api_keys_error", request, ApiKeyService.list_keys, db, project.id, project.tenant_id)
    return {"api_keys": keys}


@router.delete("/api-keys/{api_key_id}")
def delete_api_key(api_key_id: int, request: Request, project: Project = Depends(project_scope),
                   db: Session = Depends(get_db)):
    _guard("delete_api_key_error", request, ApiKeyService.delete_key, db, api_key_id, project.id, project.tenant_id)
    return {"message": "API key deleted"}


# ---- Configs ----

@router.get("/config", response_model=ConfigListResponse)
def list_configs(request: Request, project: Project = Depends(project_scope), db: Session = Depends(get_db)):
    configs = _guard("get_configs_error", request, ConfigService.list_configs, db, project.id, project.tenant_id)
    return {"configs": configs}


@router.post("/config", response_model=ConfigResponse, status_code=201)
def create_config(data: ConfigCreate, request: Request, project: Project = Depends(project_scope),
                  db: Session = Depends(get_db)):
    record = _guard("create_config_error", request, ConfigService.create_config,
                    db, data, project.id, project.tenant_id)
    return {"message": "Config created", "config": record}


@router.get("/config/{config_id}", response_model=ConfigResponse)
def get_config(config_id: int, request: Request, project: Project = Depends(project_scope),
               db: Session = Depends(get_db)):
    record = _guard("get_config_error", request, ConfigService.get_config,
                    db, config_id, project.tenant_id, project.id)
    if record is None:
        raise NotFoundError("Config not found")
    return {"config": record}


@router.patch("/config/{config_id}", response_model=ConfigResponse)
def update_config(config_id: int, patch: ConfigUpdate, request: Request,
                  project: Project = Depends(project_scope), db: Session = Depends(get_db)):
    record = _guard("update_config_error", request, ConfigService.update_config,
                    db, config_id, project.tenant_id, patch, project.id)
    return {"message": "Config updated", "config": record}


@router.delete("/config/{config_id}")
def delete_config(config_id: int, request: Request, project: Project = Depends(project_scope),
                  db: Session = Depends(get_db)):
    _guard("delete_config_error", request, ConfigService.delete_config, db, config_id, project.tenant_id, project.id)
    return {"message": "Config deleted"}


# ---- Feature flags ----

@router.get("/feature-flags", response_model=FeatureFlagListResponse)
def list_feature_flags(request: Request, project: Project = Depends(project_scope), db: Session = Depends(get_db)):
    flags = _guard("get_feature_flags_error", request, FeatureFlagService.list_flags,
                   db, project.id, project.tenant_id)
    return {"feature_flags": flags}


@router.post("/feature-flags", response_model=FeatureFlagResponse, status_code=201)
def create_feature_flag(data: FeatureFlagCreate, request: Request, project: Project = Depends(project_scope),
                        db: Session = Depends(get_db)):
    flag = _guard("create_feature_flag_error", request, FeatureFlagService.create_flag,
                  db, data, project.id, project.tenant_id)
    return {"message": "Feature flag created", "feature_flag": flag}


@router.get("/feature-flags/{flag_id}", response_model=FeatureFlagResponse)
def get_feature_flag(flag_id: int, request: Request, project: Project = Depends(project_scope),
                     db: Session = Depends(get_db)):
    flag = _guard("get_feature_flag_error", request, FeatureFlagService.get_flag,
                  db, flag_id, project.tenant_id, project.id)
    if flag is None:
        raise NotFoundError("Feature flag not found")
    return {"feature_flag": flag}


@router.patch("/feature-flags/{flag_id}", response_model=FeatureFlagResponse)
def update_feature_flag(flag_id: int, patch: FeatureFlagUpdate, request: Request,
                        project: Project = Depends(project_scope), db: Session = Depends(get_db)):
    flag = _guard("update_feature_flag_error", request, FeatureFlagService.update_flag,
                  db, flag_id, project.tenant_id, patch, project.id)
    return {"message": "Feature flag updated", "feature_flag": flag}


@router.delete("/feature-flags/{flag_id}")
def delete_feature_flag(flag_id: int, request: Request, project: Project = Depends(project_scope),
                        db: Session = Depends(get_db)):
    _guard("delete_feature_flag_error", request, FeatureFlagService.delete_flag,
           db, flag_id, project.tenant_id, project.id)
    return {"message": "Feature flag deleted"}
