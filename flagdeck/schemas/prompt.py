from typing import Any, List, Optional
from datetime import datetime
from pydantic import BaseModel


class PromptOut(BaseModel):
    id: int
    name: str
    body: Any
    project_id: int
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class PromptListResponse(BaseModel):
    prompts: List[PromptOut]
