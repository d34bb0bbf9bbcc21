from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..auth import AuthContext, require_any_key
from ..db import get_db
from ..errors import ApiError, NotFoundError, ValidationError, internal_error
from ..schemas.prompt import PromptListResponse, PromptOut
from ..services.prompts import PromptService, to_dict

router = APIRouter(tags=["Prompts"])


@router.get("/prompts", response_model=PromptListResponse)
def list_prompts(
    request: Request,
    ctx: AuthContext = Depends(require_any_key),
    db: Session = Depends(get_db),
):
    try:
        prompts = PromptService.list_prompts(db, ctx.project_id, ctx.tenant_id)
        return {"prompts": [to_dict(p) for p in prompts]}
    except ApiError:
        raise
    except Exception as exc:
        raise internal_error(exc, "get_prompts_error", request) from exc


@router.get("/prompts/{prompt_id}", response_model=PromptOut)
def get_prompt(
    prompt_id: str,
    request: Request,
    ctx: AuthContext = Depends(require_any_key),
    db: Session = Depends(get_db),
):
    """A prompt of the key's project; other projects' prompts look missing"""
    try:
        pid = int(prompt_id)
    except ValueError:
        raise ValidationError("Invalid prompt ID")

    try:
        prompt = PromptService.get_prompt(db, pid, ctx.project_id, ctx.tenant_id)
        if prompt is None:
            raise NotFoundError("Prompt not found")
        return to_dict(prompt)
    except ApiError:
        raise
    except Exception as exc:
        raise internal_error(exc, "get_prompt_by_id_error", request) from exc
