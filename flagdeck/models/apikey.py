from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Index, func
from flagdeck.db import Base

KEY_CLASS_SECRET = "secret"
KEY_CLASS_PUBLIC = "public"


class ApiKey(Base):
    __tablename__ = "api_keys"
    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    public_part = Column(String(64), nullable=False, unique=True)   # lookup handle
    private_hash = Column(String(128), nullable=False)              # bcrypt of the secret
    key_class = Column(String(16), nullable=False, default=KEY_CLASS_SECRET)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_api_keys_tenant_project", "tenant_id", "project_id"),
    )
