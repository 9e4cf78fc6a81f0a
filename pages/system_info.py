import os
from datetime import datetime

import streamlit as st

from src.app_paths import DATA_DIR, PAGES_DIR, PROMPT_CONFIG_PATH
from src.logging_config import logger
from src.ocr_prompt_config import get_ocr_extraction_model, get_repair_attempts

app_settings = st.session_state.get("app_settings", {})
app_version = app_settings.get("version", "unknown")

st.title("🔧 System Information")

st.write(f"**App Version:** {app_version}")
st.write(f"**Current Time:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
st.write(f"**Working Directory:** {os.getcwd()}")
st.write(f"**OCR Model:** `{get_ocr_extraction_model()}`")
st.write(f"**Repair attempts:** {get_repair_attempts()}")
st.write(f"**OPENAI_API_KEY set:** {'✅' if os.getenv('OPENAI_API_KEY', '').strip() else '❌'}")

st.write("**Paths:**")
for path in [DATA_DIR, PAGES_DIR, PROMPT_CONFIG_PATH]:
    st.write(f"{'✅' if path.exists() else '❌'} {path}")

logger.debug("Session state keys: %s", sorted(st.session_state.keys()))
st.caption("Session state keys logged to terminal.")
