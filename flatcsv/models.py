from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from .rules import DEFAULT_SEPARATOR, FILE_ENCODING, TARGET_ENCODING


class ExportOptions(BaseModel):
    separator: str = Field(default=DEFAULT_SEPARATOR)
    treat_enumerables_as_columns: bool = True
    first_columns_to_skip: int = Field(default=0, ge=0)
    auto_map: bool = False
    # write each object of a collection as soon as it is mapped; the header
    # then holds only the columns known after the first object
    flush_each_object: bool = True
    encoding: str = Field(default=FILE_ENCODING)

    @field_validator("separator")
    @classmethod
    def _single_character(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("separator must be a single character")
        return value


class ExportedCsv(BaseModel):
    sha256: str
    encoding: str = Field(default=TARGET_ENCODING)
    content_b64: str


class ExportReport(BaseModel):
    rows: int = 0
    columns: int = 0
    objects: int = 0
    input_encoding: Optional[str] = Field(default=None, examples=["utf-8"])
    decode_fallback: bool = False


class ExportResponse(BaseModel):
    csv: ExportedCsv
    report: ExportReport


class HealthResponse(BaseModel):
    ok: bool = True
