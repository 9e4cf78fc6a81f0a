from __future__ import annotations

import json
import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.app_paths import PROMPT_CONFIG_PATH
from src.logging_config import logger

CONFIG_PATH = PROMPT_CONFIG_PATH

DEFAULT_SYSTEM_PROMPT = (
    "You are an expert OCR and data structuring specialist. "
    "Transcribe exactly what is visible in the image: do not invent, do not guess. "
    "Always answer through the provided tool and put your whole answer into `extracted_data`."
)
DEFAULT_USER_PROMPT = (
    "Analyze the attached image. Identify if there is a table in the image. "
    "If a table is present, extract the data and structure it into a JSON array of objects. "
    "Each object should represent a row in the table, with keys corresponding to the column headers. "
    "Ensure the JSON is valid and parsable.\n\n"
    "If no table is present, extract the relevant text from the image and return it "
    'as a JSON object with a single key "text".\n\n'
    "Output (JSON format):"
)
DEFAULT_OCR_EXTRACTION_MODEL = "gpt-4o"
DEFAULT_REPAIR_ATTEMPTS = 0


class OcrEnvelope(BaseModel):
    """Fixed answer shape the model must use; its content is still free-form."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    extracted_data: str = Field(
        description=(
            "The data extracted from the image. A JSON array of row objects when the image "
            'holds a table, otherwise a JSON object {"text": "..."} or plain text.'
        ),
    )

    @field_validator("extracted_data", mode="before")
    @classmethod
    def _serialize_structured(cls, value: Any) -> Any:
        # Some models put the table itself into the field instead of a JSON string.
        if isinstance(value, (list, dict)):
            return json.dumps(value, ensure_ascii=False)
        return value


class PromptConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    user_prompt: str = DEFAULT_USER_PROMPT

    @field_validator("system_prompt", "user_prompt")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Prompt must not be empty.")
        return value


DEFAULT_PROMPT_CONFIG = PromptConfig()


def envelope_json_schema() -> dict[str, Any]:
    return OcrEnvelope.model_json_schema(by_alias=True)


def load_prompt_config() -> dict[str, Any]:
    if CONFIG_PATH.exists():
        try:
            with CONFIG_PATH.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError):
            logger.warning("Prompt config unreadable path=%s, using defaults.", CONFIG_PATH)
            data = {}
    else:
        data = {}
    if not isinstance(data, dict):
        data = {}

    try:
        config = PromptConfig.model_validate(
            {
                "system_prompt": data.get("system_prompt", DEFAULT_SYSTEM_PROMPT),
                "user_prompt": data.get("user_prompt", DEFAULT_USER_PROMPT),
            }
        )
    except ValidationError:
        config = DEFAULT_PROMPT_CONFIG
    return config.model_dump()


def save_prompt_config(config: dict[str, Any]) -> None:
    merged = {
        "system_prompt": config.get("system_prompt", DEFAULT_SYSTEM_PROMPT),
        "user_prompt": config.get("user_prompt", DEFAULT_USER_PROMPT),
    }
    validated = PromptConfig.model_validate(merged)
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    with CONFIG_PATH.open("w", encoding="utf-8") as handle:
        json.dump(validated.model_dump(), handle, ensure_ascii=True, indent=2)


def build_system_prompt(system_prompt: str) -> str:
    return system_prompt.rstrip()


def build_image_user_content(user_prompt: str, image_reference: str) -> list[dict[str, Any]]:
    return [
        {"type": "text", "text": user_prompt.rstrip()},
        {"type": "image_url", "image_url": {"url": image_reference}},
    ]


def get_ocr_extraction_model() -> str:
    return os.getenv("OCR_EXTRACTION_MODEL", "").strip() or DEFAULT_OCR_EXTRACTION_MODEL


def get_repair_attempts() -> int:
    raw = os.getenv("OCR_REPAIR_ATTEMPTS", "").strip()
    if not raw:
        return DEFAULT_REPAIR_ATTEMPTS
    try:
        return max(0, int(raw))
    except ValueError:
        logger.warning("OCR_REPAIR_ATTEMPTS=%r is not an integer, using %s.", raw, DEFAULT_REPAIR_ATTEMPTS)
        return DEFAULT_REPAIR_ATTEMPTS
