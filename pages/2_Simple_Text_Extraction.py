import streamlit as st

from src.extraction_result import TextResult
from src.ui_state import (
    clear_screen,
    get_extraction_session,
    render_copy_and_download,
    render_image_upload,
)

SCREEN_KEY = "simple_text_extraction"

session = get_extraction_session(SCREEN_KEY)

st.title("📝 Simple text extraction")

with st.sidebar:
    if st.button("🗑️ Clear", width="stretch"):
        clear_screen(session, SCREEN_KEY)
        st.rerun()

render_image_upload(session, SCREEN_KEY)

if st.button(
    "Extract Simple Text",
    type="primary",
    disabled=session.loading or not session.image_reference,
):
    with st.spinner("Extracting..."):
        session.run_extraction()
    st.session_state.pop(f"{SCREEN_KEY}_csv_export", None)
    st.session_state.pop(f"{SCREEN_KEY}_clipboard", None)

result = session.result
if result is not None:
    # Tables are shown as the raw answer here; the table page renders them.
    shown = result.value if isinstance(result, TextResult) else result.raw
    st.text_area("Extracted text", value=shown, height=300, disabled=True)
    render_copy_and_download(session, SCREEN_KEY)
