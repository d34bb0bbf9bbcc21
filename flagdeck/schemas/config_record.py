from typing import Optional, List, Literal
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

ValueType = Literal["string", "number", "boolean"]


class ConfigCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Config name, unique per project")
    description: str = Field("", description="Free-form description")
    value_type: ValueType = Field("string", description="Declared scalar type of the value")
    value: str = Field("", description="Value, always stored as text")
    is_public: bool = Field(False, description="Readable with a public key")


class ConfigUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    value_type: Optional[ValueType] = None
    value: Optional[str] = None
    is_public: Optional[bool] = None


class ConfigOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    project_id: int
    name: str
    description: str
    value_type: str
    value: str
    is_public: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class ConfigListResponse(BaseModel):
    configs: List[ConfigOut]


class ConfigResponse(BaseModel):
    message: Optional[str] = None
    config: ConfigOut
