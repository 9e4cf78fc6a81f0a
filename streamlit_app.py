import os
from pathlib import Path

import streamlit as st

from src.app_paths import DATA_DIR, load_environment
from src.logging_config import logger

BASE_DIR = Path(__file__).resolve().parent

load_environment()

st.set_page_config(
    page_title="Sheet Extraction",
    page_icon="📄",
    layout="wide",
)

FEATURE_PAGES = [
    {
        "id": "extract_table",
        "path": "pages/1_Extract_Table.py",
        "title": "Extract Table",
        "description": "Read a table from an image and export it as CSV",
        "icon": "📊",
    },
    {
        "id": "simple_text_extraction",
        "path": "pages/2_Simple_Text_Extraction.py",
        "title": "Simple Text Extraction",
        "description": "Read the plain text of an image",
        "icon": "📝",
    },
    {
        "id": "api_extraction",
        "path": "pages/3_API_Extraction.py",
        "title": "API Extraction",
        "description": "Send an image through the HTTP API",
        "icon": "🧪",
    },
]

NAV_PAGES = [
    {
        "id": "home",
        "path": "pages/home.py",
        "title": "Home",
        "description": "Choose an extraction option",
        "icon": "🏠",
    },
    *FEATURE_PAGES,
    {
        "id": "system_info",
        "path": "pages/system_info.py",
        "title": "System Info",
        "description": "Environment diagnostics",
        "icon": "🔧",
    },
]


@st.cache_resource
def get_app_settings() -> dict:
    """Cache application settings."""
    pages_by_id = {
        page["id"]: {
            "title": page["title"],
            "description": page["description"],
            "path": page["path"],
            "icon": page["icon"],
        }
        for page in FEATURE_PAGES
    }
    return {
        "app_name": "Sheet Extraction",
        "version": "1.0.0",
        "pages": pages_by_id,
        "pages_list": list(pages_by_id.values()),
    }


def _init_session_state() -> None:
    if "app_settings" not in st.session_state:
        st.session_state.app_settings = get_app_settings()


def _build_navigation_pages() -> list[st.Page]:
    return [
        st.Page(page["path"], title=page["title"], icon=page["icon"])
        for page in NAV_PAGES
    ]


def validate_environment() -> list[str]:
    """Validate that the application environment is properly set up."""
    issues: list[str] = []

    for page_info in NAV_PAGES:
        page_path = BASE_DIR / page_info["path"]
        if not page_path.exists():
            issues.append(f"Missing page file: {page_info['path']}")

    if not os.getenv("OPENAI_API_KEY", "").strip():
        # Not fatal: the key can still come from st.secrets.
        logger.warning("OPENAI_API_KEY is not set in the environment.")

    if issues:
        for issue in issues:
            logger.warning("Environment issue: %s", issue)
    else:
        logger.info("Environment validation passed. data_dir=%s", DATA_DIR)

    return issues


def main() -> None:
    """Main application function with Streamlit navigation."""
    _init_session_state()
    app_settings = st.session_state.app_settings

    logger.info("Starting app: %s v%s", app_settings["app_name"], app_settings["version"])

    issues = validate_environment()
    if issues:
        logger.error("Environment issues detected: %s", issues)
        st.error("⚠️ Environment Issues Detected. See terminal logs for details.")
        st.warning("Please ensure all required files and directories are present.")
        return

    nav = st.navigation(_build_navigation_pages(), position="sidebar", expanded=True)
    nav.run()


if __name__ == "__main__":
    main()
