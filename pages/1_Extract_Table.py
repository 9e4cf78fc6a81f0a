import streamlit as st

from src.extraction_result import TableResult, TextResult
from src.ocr_prompt_config import (
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_USER_PROMPT,
    load_prompt_config,
    save_prompt_config,
)
from src.table_formatting import rows_to_frame
from src.ui_state import (
    clear_screen,
    get_extraction_session,
    render_copy_and_download,
    render_image_upload,
)

SCREEN_KEY = "extract_table"

session = get_extraction_session(SCREEN_KEY)

st.title("📊 Sheet extraction")

with st.sidebar:
    with st.expander("⚙️ Prompt", expanded=False):
        prompt_config = load_prompt_config()
        system_prompt = st.text_area("System prompt", value=prompt_config["system_prompt"], height=150)
        user_prompt = st.text_area("Instruction", value=prompt_config["user_prompt"], height=250)
        save_col, default_col = st.columns(2)
        with save_col:
            if st.button("Save", width="stretch"):
                try:
                    save_prompt_config({"system_prompt": system_prompt, "user_prompt": user_prompt})
                    st.success("Prompt saved.")
                except ValueError as exc:
                    st.error(f"Prompt not saved: {exc}")
        with default_col:
            if st.button("Defaults", width="stretch"):
                save_prompt_config(
                    {"system_prompt": DEFAULT_SYSTEM_PROMPT, "user_prompt": DEFAULT_USER_PROMPT}
                )
                st.rerun()

    if st.button("🗑️ Clear", width="stretch"):
        clear_screen(session, SCREEN_KEY)
        st.rerun()

render_image_upload(session, SCREEN_KEY)

if st.button(
    "Extract data",
    type="primary",
    disabled=session.loading or not session.image_reference,
):
    with st.spinner("Extracting data..."):
        result = session.run_extraction()
    st.session_state.pop(f"{SCREEN_KEY}_csv_export", None)
    st.session_state.pop(f"{SCREEN_KEY}_clipboard", None)
    if result is not None:
        # Tell the user once that the answer could not be read as a table.
        session.table_or_notice()

result = session.result
if isinstance(result, TableResult) and result.rows:
    st.caption("Extracted data")
    st.dataframe(rows_to_frame(result.rows, result.columns), width="stretch", hide_index=True)
elif isinstance(result, TextResult):
    st.text_area("Extracted text", value=result.value, height=300, disabled=True)
else:
    st.write("No text extracted yet or invalid data format.")

if result is not None:
    render_copy_and_download(session, SCREEN_KEY)
    if session.model_version:
        st.caption(f"Model: `{session.model_version}`")
