from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable

from openai import OpenAI
from pydantic import BaseModel, ValidationError

from src.errors import StructuredExtractionError
from src.ocr_prompt_config import OcrEnvelope

NormalizerFn = Callable[[dict[str, Any]], tuple[dict[str, Any], dict[str, Any]]]


@dataclass(frozen=True)
class ExtractionTarget:
    key: str
    function_name: str
    description: str
    model: type[BaseModel]
    normalize: NormalizerFn


def _normalize_ocr(payload: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    value = payload.get("extracted_data")
    if isinstance(value, (list, dict)):
        value = json.dumps(value, ensure_ascii=False)
    elif value is None:
        value = ""
    else:
        value = str(value)
    return {"extracted_data": value}, {
        "chars": len(value),
        "blank": not value.strip(),
    }


EXTRACTION_TARGETS: dict[str, ExtractionTarget] = {
    "ocr_v1": ExtractionTarget(
        key="ocr_v1",
        function_name="extract_ocr_v1",
        description="Return the text or table read from the image in the `extracted_data` field.",
        model=OcrEnvelope,
        normalize=_normalize_ocr,
    ),
}


def _build_tools(target: ExtractionTarget) -> list[dict[str, Any]]:
    return [
        {
            "type": "function",
            "function": {
                "name": target.function_name,
                "description": target.description,
                "parameters": target.model.model_json_schema(by_alias=True),
            },
        }
    ]


def get_tools_for_target(target_key: str) -> list[dict[str, Any]]:
    target = EXTRACTION_TARGETS.get(target_key)
    if target is None:
        raise StructuredExtractionError(f"Unknown extraction target: {target_key}")
    return _build_tools(target)


def _extract_arguments(response: Any) -> str:
    message = response.choices[0].message
    tool_calls = getattr(message, "tool_calls", None) or []
    if tool_calls:
        fn = getattr(tool_calls[0], "function", None)
        args = getattr(fn, "arguments", None)
        if isinstance(args, str) and args.strip():
            return args
    content = getattr(message, "content", None)
    if isinstance(content, str) and content.strip():
        return content
    return "{}"


def _json_error_message(raw_args: str, error: ValidationError) -> str:
    return (
        "The following JSON failed schema validation.\n\n"
        "Re-read the image from this conversation and only correct invalid parts.\n\n"
        "JSON:\n"
        f"{raw_args}\n\n"
        "Validation error:\n"
        f"{error}\n\n"
        "Fix ONLY invalid fields and return corrected JSON that fully matches the schema."
    )


def _salvage_payload(raw_args: str) -> dict[str, Any]:
    """Best effort when the model ignored the envelope: keep whatever it said."""
    try:
        payload = json.loads(raw_args)
    except json.JSONDecodeError:
        return {"extracted_data": raw_args}
    if isinstance(payload, dict) and "extracted_data" in payload:
        return payload
    if isinstance(payload, dict) and not payload:
        return {}
    return {"extracted_data": raw_args}


def extract_with_repair(
    *,
    client: OpenAI,
    model_name: str,
    system_prompt: str,
    user_content: Any,
    target_key: str,
    max_retries: int = 0,
    temperature: float = 0,
) -> tuple[dict[str, Any], dict[str, Any]]:
    target = EXTRACTION_TARGETS.get(target_key)
    if target is None:
        raise StructuredExtractionError(f"Unknown extraction target: {target_key}")

    tools = _build_tools(target)
    messages: list[dict[str, Any]] = [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_content},
    ]

    last_error: ValidationError | None = None
    last_raw_args = "{}"

    for attempt in range(max_retries + 1):
        response = client.chat.completions.create(
            model=model_name,
            temperature=temperature,
            messages=messages,
            tools=tools,
            tool_choice={
                "type": "function",
                "function": {"name": target.function_name},
            },
        )
        raw_args = _extract_arguments(response)
        last_raw_args = raw_args

        try:
            parsed = target.model.model_validate_json(raw_args).model_dump(by_alias=True)
            normalized, normalization_report = target.normalize(parsed)
            return normalized, {
                "attempts": attempt + 1,
                "raw_arguments": raw_args,
                "target_key": target_key,
                "normalization": normalization_report,
            }
        except ValidationError as error:
            last_error = error
            if attempt == max_retries:
                break
            messages.append({"role": "user", "content": _json_error_message(raw_args, error)})

    # Fallback: try to salvage with local normalization before failing hard.
    normalized, normalization_report = target.normalize(_salvage_payload(last_raw_args))
    if not normalization_report.get("blank", True):
        return normalized, {
            "attempts": max_retries + 1,
            "raw_arguments": last_raw_args,
            "target_key": target_key,
            "fallback_used": True,
            "normalization": normalization_report,
            "validation_error": str(last_error) if last_error else "",
        }

    raise StructuredExtractionError(
        f"Extraction failed for target {target_key} after {max_retries + 1} attempts"
    ) from last_error
