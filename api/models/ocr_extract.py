from pydantic import BaseModel, Field

from src.extraction_result import ExtractionResult


class OcrExtractRequest(BaseModel):
    image_reference: str = Field(
        ...,
        description="http(s) URL or base64 data URI of the image to read.",
    )


class OcrExtractResponse(BaseModel):
    request_id: str = Field(..., description="Correlation id for tracing/logs.")
    status: str = Field(default="ok")
    # Discriminated on `kind`: "table" carries columns/rows, "text" carries value.
    result: ExtractionResult
    model_version: str
    attempts: int = 1


class CsvExportRequest(BaseModel):
    raw: str = Field(..., description="Model output as returned in `result.raw`.")
