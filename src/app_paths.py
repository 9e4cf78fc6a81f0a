from pathlib import Path

from dotenv import load_dotenv

# Single source of truth for data locations.
BASE_DIR = Path(__file__).resolve().parents[1]
DATA_DIR = BASE_DIR / "data"
PROMPT_CONFIG_PATH = DATA_DIR / "ocr_extraction_prompt.json"
PAGES_DIR = BASE_DIR / "pages"
ENV_PATH = BASE_DIR / ".env"

TABLE_CSV_FILENAME = "extracted_data.csv"
TEXT_CSV_FILENAME = "extracted_text.csv"
CSV_MIME_TYPE = "text/csv"


def load_environment(env_path: Path = ENV_PATH) -> bool:
    """Load the repo .env; variables already set in the environment win."""
    if not env_path.exists():
        return False
    return load_dotenv(dotenv_path=env_path, override=False)
