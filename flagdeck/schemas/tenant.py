from typing import Optional
from pydantic import BaseModel, Field


class SignUp(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    name: str = Field("", max_length=128)
    project_name: str = Field("Default Project", min_length=1, max_length=128)


class SignUpResult(BaseModel):
    tenant_id: int
    user_id: int
    project_id: int
    full_key: Optional[str] = None
