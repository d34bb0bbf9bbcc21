import logging
from typing import List, Optional

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError
from ..models.config_record import ConfigRecord
from ..schemas.config_record import ConfigCreate, ConfigUpdate

logger = logging.getLogger(__name__)


class ConfigService:
    """Service for project-scoped config entries"""

    @staticmethod
    def list_configs(db: Session, project_id: int, tenant_id: int, public_only: bool = False) -> List[ConfigRecord]:
        query = db.query(ConfigRecord).filter(
            and_(ConfigRecord.project_id == project_id, ConfigRecord.tenant_id == tenant_id)
        )
        if public_only:
            query = query.filter(ConfigRecord.is_public.is_(True))
        return query.order_by(ConfigRecord.created_at.desc(), ConfigRecord.id.desc()).all()

    @staticmethod
    def get_config(db: Session, config_id: int, tenant_id: int, project_id: Optional[int] = None) -> Optional[ConfigRecord]:
        query = db.query(ConfigRecord).filter(and_(ConfigRecord.id == config_id, ConfigRecord.tenant_id == tenant_id))
        if project_id is not None:
            query = query.filter(ConfigRecord.project_id == project_id)
        return query.first()

    @staticmethod
    def _name_taken(db: Session, tenant_id: int, project_id: int, name: str, exclude_id: Optional[int] = None) -> bool:
        query = db.query(ConfigRecord.id).filter(
            ConfigRecord.tenant_id == tenant_id,
            ConfigRecord.project_id == project_id,
            ConfigRecord.name == name,
        )
        if exclude_id is not None:
            query = query.filter(ConfigRecord.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def create_config(db: Session, data: ConfigCreate, project_id: int, tenant_id: int) -> ConfigRecord:
        if ConfigService._name_taken(db, tenant_id, project_id, data.name):
            raise ConflictError("Config with this name already exists")

        record = ConfigRecord(
            tenant_id=tenant_id,
            project_id=project_id,
            name=data.name,
            description=data.description,
            value_type=data.value_type,
            value=data.value,
            is_public=data.is_public,
        )
        db.add(record)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Config with this name already exists")
        db.refresh(record)
        logger.info("config created", extra={"config_id": record.id, "tenant_id": tenant_id, "project_id": project_id})
        return record

    @staticmethod
    def update_config(db: Session, config_id: int, tenant_id: int, patch: ConfigUpdate,
                      project_id: Optional[int] = None) -> ConfigRecord:
        record = ConfigService.get_config(db, config_id, tenant_id, project_id)
        if record is None:
            raise NotFoundError("Config not found")

        changes = {k: v for k, v in patch.model_dump(exclude_unset=True).items() if v is not None}
        if "name" in changes and ConfigService._name_taken(
                db, tenant_id, record.project_id, changes["name"], exclude_id=record.id):
            raise ConflictError("Config with this name already exists")

        for field, value in changes.items():
            setattr(record, field, value)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Config with this name already exists")
        db.refresh(record)
        return record

    @staticmethod
    def delete_config(db: Session, config_id: int, tenant_id: int, project_id: Optional[int] = None) -> None:
        record = ConfigService.get_config(db, config_id, tenant_id, project_id)
        if record is None:
            raise NotFoundError("Config not found")
        db.delete(record)
        db.commit()
