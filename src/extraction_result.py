from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

CellValue = Any
TableRow = dict[str, CellValue]


class TableResult(BaseModel):
    kind: Literal["table"] = "table"
    columns: list[str] = Field(default_factory=list)
    rows: list[TableRow] = Field(default_factory=list)
    # Verbatim model output, used for clipboard copies.
    raw: str = ""


class TextResult(BaseModel):
    kind: Literal["text"] = "text"
    value: str = ""
    raw: str = ""


ExtractionResult = Annotated[Union[TableResult, TextResult], Field(discriminator="kind")]

extraction_result_adapter: TypeAdapter[ExtractionResult] = TypeAdapter(ExtractionResult)


class ExtractionOutcome(BaseModel):
    result: ExtractionResult
    model_version: str
    attempts: int = 1
    duration_ms: float = 0.0
