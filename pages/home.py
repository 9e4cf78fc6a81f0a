import streamlit as st

app_settings = st.session_state.get("app_settings", {})
app_name = app_settings.get("app_name", "Sheet Extraction")
pages = app_settings.get("pages_list", [])

st.title(f"📄 {app_name}")

st.markdown(
    """
## Choose an extraction option

Upload a photo or scan, let the vision model read it and get the result back
as a table (with CSV export) or as plain text.
"""
)

for page_info in pages:
    st.page_link(page_info["path"], label=page_info["title"], icon=page_info["icon"])
    st.caption(page_info["description"])
