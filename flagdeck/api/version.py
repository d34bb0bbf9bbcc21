import os

from fastapi import APIRouter

from ..config import API_VERSION

router = APIRouter()


@router.get("/version", include_in_schema=False)
def get_version():
    git_sha = os.getenv("GIT_SHA", "unknown")
    return {
        "status": "ok",
        "api_version": "v1",
        "version": API_VERSION,
        "git_sha": git_sha[:7],
    }
