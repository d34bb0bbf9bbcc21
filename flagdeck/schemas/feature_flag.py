from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from .config_record import ValueType


class FeatureFlagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Flag name; variants share it")
    description: str = Field("", description="Free-form description")
    value_type: ValueType = Field("string", description="Declared scalar type of the value")
    value: str = Field("", description="Value, always stored as text")
    is_public: bool = Field(False, description="Resolvable with a public key")
    user_id: str = Field("", max_length=255, description="Targeted user id, empty for any")
    user_role: str = Field("", max_length=255, description="Targeted user role, empty for any")
    user_account_id: str = Field("", max_length=255, description="Targeted account id, empty for any")


class FeatureFlagUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    value_type: Optional[ValueType] = None
    value: Optional[str] = None
    is_public: Optional[bool] = None
    user_id: Optional[str] = Field(None, max_length=255)
    user_role: Optional[str] = Field(None, max_length=255)
    user_account_id: Optional[str] = Field(None, max_length=255)


class FeatureFlagOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    project_id: int
    name: str
    description: str
    value_type: str
    value: str
    is_public: bool
    user_id: str
    user_role: str
    user_account_id: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class FeatureFlagListResponse(BaseModel):
    feature_flags: List[FeatureFlagOut]


class FeatureFlagResponse(BaseModel):
    message: Optional[str] = None
    feature_flag: FeatureFlagOut


class FlagQuery(BaseModel):
    """Runtime resolution request"""
    names: List[str] = Field(..., min_length=1, description="At least one name is required")
    user_id: Optional[str] = None
    user_role: Optional[str] = None
    user_account_id: Optional[str] = None
