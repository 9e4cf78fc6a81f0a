from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from src.app_paths import CSV_MIME_TYPE, TABLE_CSV_FILENAME, TEXT_CSV_FILENAME
from src.errors import ExtractionError, InvalidImageReferenceError, NoDataError
from src.extraction_result import ExtractionOutcome, ExtractionResult, TableResult
from src.logging_config import logger
from src.notifier import Notifier
from src.ocr_extraction import extract_from_image, image_bytes_to_data_uri
from src.table_formatting import (
    FORMAT_ERROR_MESSAGE,
    NO_DATA_MESSAGE,
    clipboard_text,
    rows_to_csv,
    text_to_csv,
)

Extractor = Callable[[str], ExtractionOutcome]


@dataclass(frozen=True)
class CsvExport:
    filename: str
    content: str
    mime: str = CSV_MIME_TYPE

    @property
    def data(self) -> bytes:
        return self.content.encode("utf-8")


class ExtractionSession:
    """
    State behind one extraction screen.

    Holds the uploaded image, the current result and the loading flag. All
    user feedback goes through the injected notifier, so the same session runs
    under Streamlit and in tests.
    """

    def __init__(self, notifier: Notifier, extractor: Extractor | None = None) -> None:
        self.notifier = notifier
        self.extractor: Extractor = extractor or extract_from_image
        self.image_reference: str | None = None
        self.result: ExtractionResult | None = None
        self.model_version: str | None = None
        self.loading = False

    def load_image(self, image_bytes: bytes, content_type: str | None) -> None:
        try:
            self.image_reference = image_bytes_to_data_uri(image_bytes, content_type)
        except InvalidImageReferenceError as exc:
            self.notifier.error("Could not read the image.", str(exc))
            return
        self.result = None
        self.model_version = None

    def run_extraction(self) -> ExtractionResult | None:
        if not self.image_reference:
            self.notifier.info("Please upload an image first.")
            return None
        if self.loading:
            self.notifier.info("An extraction is already running.")
            return None

        previous_result = self.result
        self.loading = True
        try:
            outcome = self.extractor(self.image_reference)
        except (ExtractionError, InvalidImageReferenceError) as exc:
            logger.warning("Extraction session: extraction failed (%s): %s", exc.__class__.__name__, exc)
            self.result = previous_result
            self.notifier.error("Error extracting text.", str(exc) or "Something went wrong.")
            return None
        finally:
            self.loading = False

        self.result = outcome.result
        self.model_version = outcome.model_version
        self.notifier.success("Text extracted successfully!")
        return self.result

    def table_or_notice(self) -> TableResult | None:
        """The current table, or None after telling the user why there is none."""
        if self.result is None:
            return None
        if isinstance(self.result, TableResult):
            return self.result
        self.notifier.error("Error parsing extracted text.", FORMAT_ERROR_MESSAGE)
        return None

    def copy_text(self) -> str | None:
        if self.result is None or not clipboard_text(self.result):
            self.notifier.info("No text to copy.")
            return None
        self.notifier.success("Text copied to clipboard!")
        return clipboard_text(self.result)

    def export_csv(self) -> CsvExport | None:
        if self.result is None:
            self.notifier.info("No text to download.")
            return None

        try:
            if isinstance(self.result, TableResult):
                export = CsvExport(TABLE_CSV_FILENAME, rows_to_csv(self.result.rows, self.result.columns))
            else:
                self.notifier.info("Exported as plain text.", FORMAT_ERROR_MESSAGE)
                export = CsvExport(TEXT_CSV_FILENAME, text_to_csv(self.result.value))
        except NoDataError:
            self.notifier.error(NO_DATA_MESSAGE, "The extracted data is empty.")
            return None

        self.notifier.success("Data downloaded as CSV!")
        return export

    def reset(self) -> None:
        self.image_reference = None
        self.result = None
        self.model_version = None
        self.loading = False
