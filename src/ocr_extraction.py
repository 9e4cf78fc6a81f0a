from __future__ import annotations

import base64
import binascii
import os
import re
from time import perf_counter
from typing import Any
from urllib.parse import urlparse

import openai
from openai import OpenAI

from src.errors import ExtractionError, InvalidImageReferenceError
from src.extraction_result import ExtractionOutcome
from src.logging_config import logger
from src.ocr_prompt_config import (
    build_image_user_content,
    build_system_prompt,
    get_ocr_extraction_model,
    get_repair_attempts,
    load_prompt_config,
)
from src.structured_extraction import extract_with_repair
from src.table_formatting import classify_response

OCR_TARGET_KEY = "ocr_v1"

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[\w.+-]+=[^;,]*)*);base64,(?P<payload>.*)$", re.DOTALL)


def image_bytes_to_data_uri(image_bytes: bytes, content_type: str | None) -> str:
    if not image_bytes:
        raise InvalidImageReferenceError("Image is empty.")
    mime = (content_type or "").strip() or "application/octet-stream"
    image_base64 = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime};base64,{image_base64}"


def validate_image_reference(image_reference: str | None) -> str:
    reference = (image_reference or "").strip()
    if not reference:
        raise InvalidImageReferenceError("Please upload an image first.")

    if reference.startswith("data:"):
        match = _DATA_URI_RE.match(reference)
        if not match or not match.group("payload"):
            raise InvalidImageReferenceError("Image data URI is not a valid base64 data URI.")
        try:
            base64.b64decode(match.group("payload"), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidImageReferenceError("Image data URI has an invalid base64 payload.") from exc
        return reference

    parsed = urlparse(reference)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise InvalidImageReferenceError(
            "Image reference must be an http(s) URL or a base64 data URI."
        )
    return reference


def _get_openai_api_key() -> str:
    return os.getenv("OPENAI_API_KEY", "").strip()


def build_openai_client(api_key: str | None = None) -> OpenAI:
    key = (api_key or _get_openai_api_key()).strip()
    if not key:
        raise ExtractionError("OPENAI_API_KEY not found. Set it in .env or st.secrets.")
    # The caller decides about retries; the SDK must not retry on its own.
    return OpenAI(api_key=key, max_retries=0)


def _describe_reference(reference: str) -> str:
    if reference.startswith("data:"):
        header = reference.split(",", 1)[0]
        return f"{header},<{len(reference)} chars>"
    return reference


def extract_from_image(
    image_reference: str,
    *,
    client: Any = None,
    model_name: str | None = None,
    max_repair_attempts: int | None = None,
    request_id: str = "-",
) -> ExtractionOutcome:
    """
    Run one OCR extraction for an image reference.

    Exactly one remote call is made unless `max_repair_attempts` allows the
    model to correct an answer that does not match the envelope schema.
    Network and model errors are raised as `ExtractionError`; an answer that
    is not JSON becomes a text result.
    """
    started_at = perf_counter()
    reference = validate_image_reference(image_reference)
    model_name = model_name or get_ocr_extraction_model()
    max_retries = get_repair_attempts() if max_repair_attempts is None else max(0, max_repair_attempts)

    prompt_config = load_prompt_config()
    system_prompt = build_system_prompt(prompt_config["system_prompt"])
    user_content = build_image_user_content(prompt_config["user_prompt"], reference)
    logger.info(
        "OCR extraction start request_id=%s model=%s image=%s repair_attempts=%s",
        request_id,
        model_name,
        _describe_reference(reference),
        max_retries,
    )

    if client is None:
        client = build_openai_client()

    try:
        parsed, trace = extract_with_repair(
            client=client,
            model_name=model_name,
            system_prompt=system_prompt,
            user_content=user_content,
            target_key=OCR_TARGET_KEY,
            max_retries=max_retries,
            temperature=0,
        )
    except openai.OpenAIError as exc:
        logger.exception(
            "OCR extraction request_id=%s: OpenAI call failed (%s).",
            request_id,
            exc.__class__.__name__,
        )
        raise ExtractionError(str(exc) or exc.__class__.__name__) from exc

    result = classify_response(parsed.get("extracted_data", ""))
    duration_ms = round((perf_counter() - started_at) * 1000, 1)
    logger.info(
        "OCR extraction done request_id=%s model=%s kind=%s rows=%s columns=%s attempts=%s fallback=%s duration_ms=%s",
        request_id,
        model_name,
        result.kind,
        len(getattr(result, "rows", [])),
        len(getattr(result, "columns", [])),
        trace.get("attempts"),
        trace.get("fallback_used", False),
        duration_ms,
    )
    return ExtractionOutcome(
        result=result,
        model_version=model_name,
        attempts=int(trace.get("attempts", 1)),
        duration_ms=duration_ms,
    )
