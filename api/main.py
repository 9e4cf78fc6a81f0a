from fastapi import FastAPI
from fastapi.responses import JSONResponse
from starlette.requests import Request

from api.core.config import settings
from api.routes.health import router as health_router
from api.routes.ocr import router as ocr_router
from src.logging_config import logger


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.api_name,
        version=settings.api_version,
        description=(
            "Image OCR API. Sends an uploaded image to a vision model and returns "
            "either a table (columns/rows) or free text, with CSV export."
        ),
    )

    @app.get("/")
    def root() -> dict[str, str]:
        return {"message": "hello world", "service": settings.api_name}

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):  # type: ignore[no-untyped-def]
        logger.exception("Unhandled error path=%s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "detail": "Unexpected server error.",
                "type": exc.__class__.__name__,
            },
        )

    app.include_router(health_router)
    app.include_router(ocr_router)
    return app


app = create_app()
