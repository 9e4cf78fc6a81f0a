import json
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

# Ensure project root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _isolate_config(tmp_path, monkeypatch):
    """Keep tests away from the real prompt file and the developer's env."""
    from src import ocr_prompt_config

    monkeypatch.setattr(ocr_prompt_config, "CONFIG_PATH", tmp_path / "ocr_extraction_prompt.json")
    for name in ("OCR_EXTRACTION_MODEL", "OCR_REPAIR_ATTEMPTS", "OPENAI_API_KEY", "API_BEARER_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    yield


def make_completion(arguments=None, content=None):
    """Build an object shaped like an OpenAI chat completion."""
    tool_calls = None
    if arguments is not None:
        tool_calls = [
            SimpleNamespace(
                type="function",
                function=SimpleNamespace(name="extract_ocr_v1", arguments=arguments),
            )
        ]
    message = SimpleNamespace(tool_calls=tool_calls, content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def envelope(extracted_data: str):
    return make_completion(arguments=json.dumps({"extracted_data": extracted_data}))


class FakeCompletions:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeOpenAI:
    def __init__(self, *responses):
        self.chat = SimpleNamespace(completions=FakeCompletions(responses))

    @property
    def calls(self):
        return self.chat.completions.calls


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
