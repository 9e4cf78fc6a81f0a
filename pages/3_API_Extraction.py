import os
import uuid

import requests
import streamlit as st
from pydantic import ValidationError

from src.app_paths import CSV_MIME_TYPE, TABLE_CSV_FILENAME, TEXT_CSV_FILENAME
from src.errors import NoDataError
from src.extraction_result import TableResult, extraction_result_adapter
from src.logging_config import logger
from src.table_formatting import result_to_csv, rows_to_frame


def _resolve_extract_url() -> str:
    base_or_endpoint = os.getenv("API_BASE_URL", "http://localhost:8000").strip()
    if not base_or_endpoint:
        base_or_endpoint = "http://localhost:8000"

    if base_or_endpoint.endswith("/api/v1/ocr/extract"):
        return base_or_endpoint

    return f"{base_or_endpoint.rstrip('/')}/api/v1/ocr/extract"


API_URL = _resolve_extract_url()
REQUEST_TIMEOUT_SECONDS = 60
API_BEARER_TOKEN = os.getenv("API_BEARER_TOKEN", "").strip()
API_TLS_VERIFY_RAW = os.getenv("API_TLS_VERIFY", "true").strip()

if API_TLS_VERIFY_RAW.lower() in {"false", "0", "no", "off"}:
    API_TLS_VERIFY: bool | str = False
else:
    API_TLS_VERIFY = API_TLS_VERIFY_RAW if API_TLS_VERIFY_RAW not in {"", "true", "1"} else True


def _validate_response_shape(payload: dict) -> list[str]:
    issues: list[str] = []
    for key in ["request_id", "status", "result", "model_version"]:
        if key not in payload:
            issues.append(f"Missing field: {key}")
    if "result" in payload and not isinstance(payload["result"], dict):
        issues.append("Field 'result' should be an object.")
    return issues


st.title("🧪 API Extraction")
st.caption("Upload an image, send it to the OCR API and inspect the JSON answer.")

uploaded_file = st.file_uploader(
    "Select image",
    type=["jpg", "jpeg", "png", "webp", "gif", "heic"],
    help="The image is posted to the configured API.",
)

send_clicked = st.button("Send image to API", type="primary", disabled=uploaded_file is None)

if send_clicked and uploaded_file is not None:
    request_id = str(uuid.uuid4())
    files = {
        "image": (
            uploaded_file.name,
            uploaded_file.getvalue(),
            uploaded_file.type or "application/octet-stream",
        )
    }
    headers = {"X-Request-Id": request_id}
    if API_BEARER_TOKEN:
        headers["Authorization"] = f"Bearer {API_BEARER_TOKEN}"

    st.info(f"Sending request to: {API_URL}")
    logger.info(
        "API Extraction: sending image request request_id=%s filename=%s endpoint=%s",
        request_id,
        uploaded_file.name,
        API_URL,
    )
    with st.spinner("Calling API..."):
        try:
            response = requests.post(
                API_URL,
                headers=headers,
                files=files,
                timeout=REQUEST_TIMEOUT_SECONDS,
                verify=API_TLS_VERIFY,
            )
        except requests.RequestException as exc:
            logger.exception("API Extraction: request failed request_id=%s", request_id)
            st.error(f"Request failed: {exc}")
            st.stop()

    st.write(f"HTTP Status: `{response.status_code}`")
    try:
        response_json = response.json()
    except ValueError:
        logger.error(
            "API Extraction: response is not JSON request_id=%s status=%s body=%s",
            request_id,
            response.status_code,
            response.text[:1500],
        )
        st.warning("Response is not JSON. Showing raw text.")
        st.code(response.text[:5000])
        st.stop()

    if response.status_code >= 400:
        logger.error(
            "API Extraction: backend returned error status request_id=%s status=%s body=%s",
            request_id,
            response.status_code,
            response.text[:1500],
        )
        detail = response_json.get("detail") if isinstance(response_json, dict) else None
        st.error(f"Error extracting text. {detail or ''}".strip())
    elif isinstance(response_json, dict):
        issues = _validate_response_shape(response_json)
        if issues:
            logger.warning("API Extraction: shape issues request_id=%s issues=%s", request_id, issues)
            st.warning("Response shape check found issues:")
            for issue in issues:
                st.write(f"- {issue}")
        st.session_state["api_ocr_response"] = response_json

current_response = st.session_state.get("api_ocr_response")

if isinstance(current_response, dict):
    if st.button("Clear current API response"):
        st.session_state.pop("api_ocr_response", None)
        st.rerun()

    with st.expander("JSON response", expanded=False):
        st.json(current_response)

    try:
        result = extraction_result_adapter.validate_python(current_response.get("result"))
    except ValidationError as exc:
        logger.warning("API Extraction: result does not validate: %s", exc)
        st.warning("The extracted text is not in the expected format.")
        st.stop()

    if isinstance(result, TableResult):
        if result.rows:
            st.subheader("Rows preview")
            st.dataframe(rows_to_frame(result.rows, result.columns), width="stretch", hide_index=True)
        filename = TABLE_CSV_FILENAME
    else:
        st.text_area("Extracted text", value=result.value, height=300, disabled=True)
        filename = TEXT_CSV_FILENAME

    try:
        csv_content = result_to_csv(result)
    except NoDataError as exc:
        st.info(str(exc))
    else:
        st.download_button(
            label=f"📥 Download {filename}",
            data=csv_content.encode("utf-8"),
            file_name=filename,
            mime=CSV_MIME_TYPE,
        )
