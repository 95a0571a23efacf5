import base64
import hashlib
import io

from fastapi import FastAPI, UploadFile, File, HTTPException, Query

from .errors import InputDecodeError
from .exporter import Exporter
from .models import ExportOptions, ExportResponse, HealthResponse
from .normalize import load_records
from .rules import ACCEPTED_SUFFIXES, DEFAULT_SEPARATOR, TARGET_ENCODING
from .settings import get_settings

app = FastAPI(
    title="flatcsv",
    description="Flatten nested JSON documents into CSV tables",
    version="0.1.0",
)


async def _read_records(file: UploadFile):
    if not (file.filename or "").lower().endswith(ACCEPTED_SUFFIXES):
        raise HTTPException(status_code=422, detail="Only JSON and JSONL files are supported")

    limit = get_settings().MAX_UPLOAD_BYTES
    if file.size is not None and file.size > limit:
        raise HTTPException(status_code=413, detail="Upload too large")
    # never read more than one byte past the limit
    raw = await file.read(limit + 1)
    if len(raw) > limit:
        raise HTTPException(status_code=413, detail="Upload too large")

    try:
        return load_records(raw, file.filename)
    except InputDecodeError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


def _envelope(exporter: Exporter, text: str, input_report: dict) -> dict:
    encoded = text.encode(TARGET_ENCODING)
    return {
        "csv": {
            "sha256": hashlib.sha256(encoded).hexdigest(),
            "encoding": TARGET_ENCODING,
            "content_b64": base64.b64encode(encoded).decode("ascii"),
        },
        "report": {
            "rows": exporter.rows_written,
            "columns": exporter.columns,
            "objects": exporter.objects,
            "input_encoding": input_report["decode_used"],
            "decode_fallback": input_report["decode_fallback"],
        },
    }


def _options(separator: str, **kwargs) -> ExportOptions:
    try:
        return ExportOptions(separator=separator, **kwargs)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/export", response_model=ExportResponse)
async def export(
    file: UploadFile = File(...),
    separator: str = Query(DEFAULT_SEPARATOR),
    columns: bool = Query(True, description="Lists become indexed columns instead of extra rows"),
    auto_map: bool = Query(False),
):
    options = _options(separator, treat_enumerables_as_columns=columns, auto_map=auto_map,
                       flush_each_object=False)
    records, input_report = await _read_records(file)

    buffer = io.StringIO(newline="")
    with Exporter(options) as exporter:
        if options.auto_map:
            exporter.generate_csv_auto_map(records, buffer)
        else:
            exporter.generate_csv(records, buffer)
    return _envelope(exporter, buffer.getvalue(), input_report)


@app.post("/binarize", response_model=ExportResponse)
async def binarize(
    file: UploadFile = File(...),
    separator: str = Query(DEFAULT_SEPARATOR),
    skip: int = Query(0, ge=0, description="Leading columns passed through unchanged"),
    columns: bool = Query(True),
):
    options = _options(separator, treat_enumerables_as_columns=columns, first_columns_to_skip=skip)
    records, input_report = await _read_records(file)

    buffer = io.StringIO(newline="")
    with Exporter(options) as exporter:
        exporter.generate_binary_format(records, buffer)
    return _envelope(exporter, buffer.getvalue(), input_report)
