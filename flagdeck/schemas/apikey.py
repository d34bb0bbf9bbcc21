from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class ApiKeyCreate(BaseModel):
    type: Literal["secret", "public"] = Field("secret", description="Key class")


class ApiKeyOut(BaseModel):
    """Stored key without its hash"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    project_id: int
    public_part: str
    key_class: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class ApiKeyCreated(BaseModel):
    message: str
    api_key: ApiKeyOut
    full_key: str = Field(..., description="sk_{public}_{private}; shown only once")
    public_key: Optional[str] = Field(None, description="pk_{public}, for public-class keys only")


class ApiKeyListResponse(BaseModel):
    api_keys: List[ApiKeyOut]
