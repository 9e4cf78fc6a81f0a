import json

import pytest
from pydantic import ValidationError

from src import ocr_prompt_config
from src.ocr_prompt_config import (
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_USER_PROMPT,
    get_ocr_extraction_model,
    get_repair_attempts,
    load_prompt_config,
    save_prompt_config,
)


def test_defaults_when_file_missing():
    assert load_prompt_config() == {
        "system_prompt": DEFAULT_SYSTEM_PROMPT,
        "user_prompt": DEFAULT_USER_PROMPT,
    }


def test_saved_prompt_is_loaded_back():
    save_prompt_config({"system_prompt": "Be precise.", "user_prompt": "Read the receipt."})

    assert load_prompt_config() == {
        "system_prompt": "Be precise.",
        "user_prompt": "Read the receipt.",
    }


def test_partial_file_keeps_other_default():
    ocr_prompt_config.CONFIG_PATH.write_text(json.dumps({"user_prompt": "Only this."}), encoding="utf-8")

    config = load_prompt_config()

    assert config["user_prompt"] == "Only this."
    assert config["system_prompt"] == DEFAULT_SYSTEM_PROMPT


@pytest.mark.parametrize("content", ["{broken", "[1, 2]", json.dumps({"system_prompt": "  "})])
def test_unusable_file_falls_back_to_defaults(content):
    ocr_prompt_config.CONFIG_PATH.write_text(content, encoding="utf-8")

    assert load_prompt_config()["system_prompt"] == DEFAULT_SYSTEM_PROMPT


def test_blank_prompt_is_not_saved():
    with pytest.raises(ValidationError):
        save_prompt_config({"system_prompt": "", "user_prompt": "x"})
    assert not ocr_prompt_config.CONFIG_PATH.exists()


def test_model_defaults_and_env_override(monkeypatch):
    assert get_ocr_extraction_model() == "gpt-4o"
    monkeypatch.setenv("OCR_EXTRACTION_MODEL", " gpt-4.1-mini ")
    assert get_ocr_extraction_model() == "gpt-4.1-mini"


@pytest.mark.parametrize(("raw", "expected"), [("", 0), ("2", 2), ("-3", 0), ("many", 0)])
def test_repair_attempts_from_env(monkeypatch, raw, expected):
    monkeypatch.setenv("OCR_REPAIR_ATTEMPTS", raw)
    assert get_repair_attempts() == expected
