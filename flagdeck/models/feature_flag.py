from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, DateTime, Index, UniqueConstraint, func
from flagdeck.db import Base


class FeatureFlag(Base):
    __tablename__ = "feature_flags"
    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    value_type = Column(String(16), nullable=False, default="string")
    value = Column(Text, nullable=False, default="")
    is_public = Column(Boolean, nullable=False, default=False)
    # Targeting dimensions; "" means "not targeted"
    user_id = Column(String(255), nullable=False, default="")
    user_role = Column(String(255), nullable=False, default="")
    user_account_id = Column(String(255), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "project_id", "name", "user_id", "user_role", "user_account_id",
            name="uq_feature_flags_targeting",
        ),
        Index("ix_feature_flags_lookup", "tenant_id", "project_id", "name"),
    )
