from types import SimpleNamespace

from src.extraction_session import ExtractionSession
from src.notifier import RecordingNotifier
from src.table_formatting import classify_response
from src.ui_state import sync_uploaded_image
from tests.conftest import PNG_BYTES

KEY = "extract_table"


def _uploaded(file_id, data=PNG_BYTES, name="scan.png"):
    return SimpleNamespace(
        file_id=file_id,
        name=name,
        size=len(data),
        type="image/png",
        getvalue=lambda: data,
    )


def _session():
    return ExtractionSession(notifier=RecordingNotifier(), extractor=lambda reference: None)


def test_new_upload_loads_image_and_drops_old_outputs():
    session = _session()
    state = {f"{KEY}_csv_export": "old", f"{KEY}_clipboard": "old"}

    sync_uploaded_image(session, state, KEY, _uploaded("file-1"))

    assert session.image_reference.startswith("data:image/png;base64,")
    assert state == {f"{KEY}_upload_signature": "file-1"}


def test_same_upload_is_not_reloaded_on_rerun():
    session = _session()
    state = {}
    sync_uploaded_image(session, state, KEY, _uploaded("file-1"))
    session.result = classify_response("kept")

    sync_uploaded_image(session, state, KEY, _uploaded("file-1"))

    assert session.result is not None


def test_replacing_a_file_with_same_name_and_size_is_detected():
    session = _session()
    state = {}
    sync_uploaded_image(session, state, KEY, _uploaded("file-1"))
    session.result = classify_response("from the first image")

    sync_uploaded_image(session, state, KEY, _uploaded("file-2"))

    assert session.result is None
    assert state[f"{KEY}_upload_signature"] == "file-2"


def test_removing_the_upload_clears_the_image():
    session = _session()
    state = {}
    sync_uploaded_image(session, state, KEY, _uploaded("file-1"))
    session.result = classify_response("stale")
    state[f"{KEY}_clipboard"] = "stale"

    sync_uploaded_image(session, state, KEY, None)

    assert session.image_reference is None
    assert session.result is None
    assert state == {}
    assert session.run_extraction() is None
    assert session.notifier.titles == ["Please upload an image first."]


def test_no_upload_leaves_an_empty_session_alone():
    session = _session()
    state = {}

    sync_uploaded_image(session, state, KEY, None)

    assert session.image_reference is None
    assert session.notifier.notices == []
