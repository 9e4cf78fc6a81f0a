from fastapi import APIRouter

from api.core.config import settings
from src.ocr_prompt_config import get_ocr_extraction_model

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    return {
        "status": "ok",
        "service": settings.api_name,
        "version": settings.api_version,
        "model": get_ocr_extraction_model(),
        "auth": "bearer" if settings.api_bearer_token else "disabled",
    }
