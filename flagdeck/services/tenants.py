"""
Tenant provisioning.

Signing up creates a tenant, its first user and a first project in one
transaction. Unless ALLOW_MULTIPLE_TENANTS is set the instance is
single-tenant and a second sign-up is refused.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from .. import config
from ..errors import ConflictError, NotFoundError
from ..models.project import Project
from ..models.tenant import Tenant
from ..models.user import User
from ..schemas.tenant import SignUp, SignUpResult
from .api_keys import ApiKeyService

logger = logging.getLogger("flagdeck")


class TenantService:

    @staticmethod
    def sign_up(db: Session, data: SignUp, issue_key: bool = True,
                allow_multiple: Optional[bool] = None) -> SignUpResult:
        if allow_multiple is None:
            allow_multiple = config.ALLOW_MULTIPLE_TENANTS

        if not allow_multiple and db.query(Tenant.id).first() is not None:
            raise ConflictError("A tenant already exists on this instance")
        if db.query(User.id).filter(User.email == data.email).first() is not None:
            raise ConflictError("User with this email already exists")

        tenant = Tenant()
        db.add(tenant)
        db.flush()
        user = User(tenant_id=tenant.id, email=data.email, name=data.name)
        project = Project(tenant_id=tenant.id, name=data.project_name)
        db.add_all([user, project])
        db.commit()
        logger.info("tenant created", extra={"tenant_id": tenant.id, "project_id": project.id})

        full_key = None
        if issue_key:
            _, full_key = ApiKeyService.create_key(db, project.id, tenant.id)

        return SignUpResult(tenant_id=tenant.id, user_id=user.id, project_id=project.id, full_key=full_key)

    @staticmethod
    def get_project(db: Session, project_id: int, tenant_id: int) -> Project:
        """The project, if it belongs to the tenant; NotFoundError otherwise"""
        project = (
            db.query(Project)
            .filter(Project.id == project_id, Project.tenant_id == tenant_id)
            .first()
        )
        if project is None:
            raise NotFoundError("Project not found")
        return project
