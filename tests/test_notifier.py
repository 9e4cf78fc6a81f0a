from src.notifier import Notice, RecordingNotifier


def test_recording_notifier_keeps_notices_in_order():
    notifier = RecordingNotifier()

    notifier.info("Exported as plain text.", "details")
    notifier.success("Data downloaded as CSV!")
    notifier.error("No data to download.", "The extracted data is empty.")

    assert notifier.notices == [
        Notice("info", "Exported as plain text.", "details"),
        Notice("success", "Data downloaded as CSV!"),
        Notice("error", "No data to download.", "The extracted data is empty."),
    ]
    assert notifier.titles == [
        "Exported as plain text.",
        "Data downloaded as CSV!",
        "No data to download.",
    ]
    assert notifier.last.level == "error"


def test_empty_recording_notifier_has_no_last_notice():
    assert RecordingNotifier().last is None
