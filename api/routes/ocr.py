import uuid
from time import perf_counter

from fastapi import APIRouter, Depends, File, Header, HTTPException, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from api.core.config import settings
from api.deps.security import verify_bearer_token
from api.models.ocr_extract import CsvExportRequest, OcrExtractRequest, OcrExtractResponse
from api.services.ocr_extractor import extract_from_reference, extract_from_upload
from src.app_paths import CSV_MIME_TYPE, TABLE_CSV_FILENAME, TEXT_CSV_FILENAME
from src.errors import ExtractionError, InvalidImageReferenceError, NoDataError
from src.extraction_result import TableResult
from src.logging_config import logger
from src.table_formatting import classify_response, result_to_csv

router = APIRouter(prefix="/api/v1/ocr", tags=["ocr"])

ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/gif",
    "image/heic",
    "image/heif",
}


def _looks_like_image(content: bytes) -> bool:
    if content.startswith(b"\xff\xd8\xff"):  # JPEG
        return True
    if content.startswith(b"\x89PNG\r\n\x1a\n"):  # PNG
        return True
    if content.startswith((b"GIF87a", b"GIF89a")):
        return True
    if len(content) >= 12 and content[:4] == b"RIFF" and content[8:12] == b"WEBP":
        return True
    if len(content) >= 12 and content[4:8] == b"ftyp":  # HEIC/HEIF family
        brand = content[8:12]
        return brand in {b"heic", b"heix", b"hevc", b"hevx", b"mif1", b"msf1"}
    return False


async def _run_extraction(request_id: str, func, **kwargs) -> OcrExtractResponse:  # type: ignore[no-untyped-def]
    try:
        return await run_in_threadpool(func, request_id=request_id, **kwargs)
    except InvalidImageReferenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    except ExtractionError as exc:
        logger.warning("OCR request_id=%s: extraction failed: %s", request_id, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Error extracting text: {exc}",
        ) from exc


@router.post("/extract", response_model=OcrExtractResponse)
async def extract_from_image_upload(
    image: UploadFile = File(...),
    x_request_id: str | None = Header(default=None),
    _: None = Depends(verify_bearer_token),
) -> OcrExtractResponse:
    started_at = perf_counter()
    if image.content_type not in ALLOWED_MIME_TYPES:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"Unsupported media type: {image.content_type}",
        )

    content = await image.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Image is empty.")
    if len(content) > settings.max_image_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Image exceeds max size of {settings.max_image_bytes} bytes.",
        )
    if not _looks_like_image(content):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file does not look like a valid supported image.",
        )

    request_id = x_request_id or str(uuid.uuid4())
    logger.info(
        "OCR upload accepted request_id=%s content_type=%s image_bytes=%s",
        request_id,
        image.content_type,
        len(content),
    )
    response = await _run_extraction(
        request_id,
        extract_from_upload,
        image_bytes=content,
        content_type=image.content_type or "application/octet-stream",
    )
    logger.info(
        "OCR upload finished request_id=%s total_ms=%s",
        request_id,
        round((perf_counter() - started_at) * 1000, 1),
    )
    return response


@router.post("/extract-reference", response_model=OcrExtractResponse)
async def extract_from_image_reference(
    payload: OcrExtractRequest,
    x_request_id: str | None = Header(default=None),
    _: None = Depends(verify_bearer_token),
) -> OcrExtractResponse:
    request_id = x_request_id or str(uuid.uuid4())
    return await _run_extraction(
        request_id,
        extract_from_reference,
        image_reference=payload.image_reference,
    )


@router.post("/csv")
def export_csv(
    payload: CsvExportRequest,
    _: None = Depends(verify_bearer_token),
) -> Response:
    result = classify_response(payload.raw)
    try:
        content = result_to_csv(result)
    except NoDataError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    filename = TABLE_CSV_FILENAME if isinstance(result, TableResult) else TEXT_CSV_FILENAME
    return Response(
        content=content.encode("utf-8"),
        media_type=f"{CSV_MIME_TYPE}; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/extract")
async def extract_from_image_help() -> dict[str, str]:
    return {
        "detail": (
            "Use POST /api/v1/ocr/extract with multipart form-data field 'image' (file), "
            "or POST /api/v1/ocr/extract-reference with JSON {'image_reference': <url or data URI>}."
        )
    }
