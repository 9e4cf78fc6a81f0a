from __future__ import annotations

import uuid
from typing import Any, MutableMapping

import streamlit as st

from src.extraction_result import ExtractionOutcome
from src.extraction_session import CsvExport, ExtractionSession
from src.logging_config import logger
from src.notifier import StreamlitNotifier
from src.ocr_extraction import build_openai_client, extract_from_image

UPLOAD_TYPES = ["jpg", "jpeg", "png", "webp", "gif", "heic"]


def _get_openai_api_key() -> str | None:
    try:
        secrets_key = st.secrets.get("OPENAI_API_KEY", None)
    except Exception:
        secrets_key = None
    return secrets_key


def _extract_with_app_credentials(image_reference: str) -> ExtractionOutcome:
    return extract_from_image(
        image_reference,
        client=build_openai_client(_get_openai_api_key()),
        request_id=str(uuid.uuid4()),
    )


def get_extraction_session(key: str) -> ExtractionSession:
    """One session per screen, kept across Streamlit reruns."""
    if key not in st.session_state:
        st.session_state[key] = ExtractionSession(
            notifier=StreamlitNotifier(),
            extractor=_extract_with_app_credentials,
        )
    return st.session_state[key]


def _drop_screen_outputs(state: MutableMapping[str, Any], key: str) -> None:
    for suffix in ("csv_export", "clipboard"):
        state.pop(f"{key}_{suffix}", None)


def sync_uploaded_image(
    session: ExtractionSession,
    state: MutableMapping[str, Any],
    key: str,
    uploaded_file: Any,
) -> None:
    """Keep the session image in step with the uploader widget."""
    if uploaded_file is None:
        if session.image_reference is not None:
            logger.info("Image removed screen=%s", key)
            session.reset()
        state.pop(f"{key}_upload_signature", None)
        _drop_screen_outputs(state, key)
        return

    signature = uploaded_file.file_id
    if state.get(f"{key}_upload_signature") == signature:
        return

    logger.info(
        "Image uploaded screen=%s filename=%s bytes=%s type=%s",
        key,
        uploaded_file.name,
        uploaded_file.size,
        uploaded_file.type,
    )
    session.load_image(uploaded_file.getvalue(), uploaded_file.type)
    state[f"{key}_upload_signature"] = signature
    _drop_screen_outputs(state, key)


def render_image_upload(session: ExtractionSession, key: str) -> None:
    uploaded_file = st.file_uploader(
        "Upload Image",
        type=UPLOAD_TYPES,
        key=f"{key}_uploader",
        help="The image is sent to the OCR model as a base64 data URI.",
    )
    sync_uploaded_image(session, st.session_state, key, uploaded_file)
    if uploaded_file is not None:
        st.image(uploaded_file, caption="Uploaded", width=480)


def render_copy_and_download(session: ExtractionSession, key: str) -> None:
    copy_col, download_col = st.columns(2)
    with copy_col:
        if st.button("📋 Copy to Clipboard", key=f"{key}_copy", width="stretch"):
            st.session_state[f"{key}_clipboard"] = session.copy_text()
    with download_col:
        if st.button("📄 Download as CSV", key=f"{key}_csv", width="stretch"):
            st.session_state[f"{key}_csv_export"] = session.export_csv()

    clipboard = st.session_state.get(f"{key}_clipboard")
    if clipboard:
        st.caption("Use the copy icon in the top right corner of the box.")
        st.code(clipboard, language=None)

    export: CsvExport | None = st.session_state.get(f"{key}_csv_export")
    if export is not None:
        st.download_button(
            label=f"📥 Save {export.filename}",
            data=export.data,
            file_name=export.filename,
            mime=export.mime,
            key=f"{key}_download",
        )


def clear_screen(session: ExtractionSession, key: str) -> None:
    session.reset()
    st.session_state.pop(f"{key}_upload_signature", None)
    _drop_screen_outputs(st.session_state, key)
