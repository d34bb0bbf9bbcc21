import json
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from ..models.prompt import Prompt


def decode_body(raw: str) -> Any:
    """Prompt bodies are stored as JSON text; fall back to the raw string"""
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return raw


def to_dict(prompt: Prompt) -> dict:
    return {
        "id": prompt.id,
        "name": prompt.name,
        "body": decode_body(prompt.body),
        "project_id": prompt.project_id,
        "created_at": prompt.created_at,
        "updated_at": prompt.updated_at,
    }


class PromptService:
    """Read access to prompts, always scoped to one tenant and project"""

    @staticmethod
    def list_prompts(db: Session, project_id: int, tenant_id: int) -> List[Prompt]:
        return (
            db.query(Prompt)
            .filter(Prompt.project_id == project_id, Prompt.tenant_id == tenant_id)
            .order_by(Prompt.created_at.desc(), Prompt.id.desc())
            .all()
        )

    @staticmethod
    def get_prompt(db: Session, prompt_id: int, project_id: int, tenant_id: int) -> Optional[Prompt]:
        return (
            db.query(Prompt)
            .filter(Prompt.id == prompt_id, Prompt.project_id == project_id, Prompt.tenant_id == tenant_id)
            .first()
        )
