"""
API key lifecycle: issue, list and revoke keys for a project.

The full key is only ever returned by ``create_key``; the database keeps the
public part and the bcrypt hash of the private part.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ..auth.keys import PasswordHasher, generate
from ..errors import NotFoundError
from ..models.apikey import ApiKey, KEY_CLASS_SECRET

logger = logging.getLogger("flagdeck")


class ApiKeyService:

    @staticmethod
    def create_key(db: Session, project_id: int, tenant_id: int, key_class: str = KEY_CLASS_SECRET,
                   hasher: Optional[PasswordHasher] = None) -> Tuple[ApiKey, str]:
        """Issue a new key and return the stored record with the one-time full key"""
        generated = generate(hasher)
        record = ApiKey(
            tenant_id=tenant_id,
            project_id=project_id,
            public_part=generated.public_part,
            private_hash=generated.private_hash,
            key_class=key_class,
        )
        db.add(record)
        db.commit()
        db.refresh(record)
        logger.info("AUTH: key issued, key_id=%s tenant=%s project=%s class=%s",
                    record.id, tenant_id, project_id, key_class)
        return record, generated.full_key

    @staticmethod
    def list_keys(db: Session, project_id: int, tenant_id: int) -> List[ApiKey]:
        return (
            db.query(ApiKey)
            .filter(ApiKey.project_id == project_id, ApiKey.tenant_id == tenant_id)
            .order_by(ApiKey.created_at.desc(), ApiKey.id.desc())
            .all()
        )

    @staticmethod
    def delete_key(db: Session, key_id: int, project_id: int, tenant_id: int) -> None:
        record = (
            db.query(ApiKey)
            .filter(ApiKey.id == key_id, ApiKey.project_id == project_id, ApiKey.tenant_id == tenant_id)
            .first()
        )
        if record is None:
            raise NotFoundError("API key not found")
        db.delete(record)
        db.commit()
        logger.info("AUTH: key revoked, key_id=%s tenant=%s", key_id, tenant_id)
