from time import perf_counter

from api.models.ocr_extract import OcrExtractResponse
from src.logging_config import logger
from src.ocr_extraction import extract_from_image, image_bytes_to_data_uri


def extract_from_reference(*, request_id: str, image_reference: str) -> OcrExtractResponse:
    started_at = perf_counter()
    outcome = extract_from_image(image_reference, request_id=request_id)
    response = OcrExtractResponse(
        request_id=request_id,
        status="ok",
        result=outcome.result,
        model_version=outcome.model_version,
        attempts=outcome.attempts,
    )
    logger.info(
        "OCR service done request_id=%s kind=%s total_ms=%s",
        request_id,
        response.result.kind,
        round((perf_counter() - started_at) * 1000, 1),
    )
    return response


def extract_from_upload(
    *,
    request_id: str,
    image_bytes: bytes,
    content_type: str,
) -> OcrExtractResponse:
    image_reference = image_bytes_to_data_uri(image_bytes, content_type)
    logger.info(
        "OCR service upload request_id=%s content_type=%s image_bytes=%s",
        request_id,
        content_type,
        len(image_bytes),
    )
    return extract_from_reference(request_id=request_id, image_reference=image_reference)
