"""
Input decoding for the service and the CLI.

Responsibilities:
- encoding detection (charset-normalizer) and decoding to text
- JSON / JSONL parsing into the records handed to the exporter
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Tuple, Union

from charset_normalizer import from_bytes

from .errors import InputDecodeError

logger = logging.getLogger(__name__)


def decode_input(raw: bytes) -> Tuple[str, Dict[str, Any]]:
    """
    Decode uploaded bytes to text.

    Rules:
    - Detect encoding best-effort via charset-normalizer.
    - A UTF-8 BOM is stripped.
    - If decoding with the detected encoding fails, try UTF-8, then fall back
      to the best guess with replacement characters and report it.
    """
    detected = None
    match = from_bytes(raw).best()
    if match is not None:
        detected = match.encoding

    decode_used = detected or "utf-8"
    if raw.startswith(b"\xef\xbb\xbf") and decode_used.lower().replace("-", "_") in ("utf_8", "utf8"):
        decode_used = "utf-8-sig"

    decode_fallback = False
    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        try:
            text = raw.decode("utf-8")
            decode_used = "utf-8"
        except UnicodeDecodeError:
            text = raw.decode("utf-8", errors="replace")
            decode_used = "utf-8"
        decode_fallback = True
        logger.warning("input could not be decoded as %s, fell back to %s", detected, decode_used)

    report = {
        "detected": detected,
        "decode_used": decode_used,
        "decode_fallback": decode_fallback,
    }
    return text, report


def parse_records(text: str, jsonl: bool = False) -> Union[Any, List[Any]]:
    """
    Parse JSON (any document) or JSONL (one document per non-blank line).

    A JSON array comes back as a list, which the exporter treats as one
    object per element.
    """
    if not jsonl:
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise InputDecodeError(f"invalid JSON: {exc.msg}", exc.lineno) from exc

    records = []
    for line_num, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if not line:
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError as exc:
            raise InputDecodeError(f"invalid JSON: {exc.msg}", line_num) from exc
    return records


def load_records(raw: bytes, filename: str) -> Tuple[Any, Dict[str, Any]]:
    text, report = decode_input(raw)
    records = parse_records(text, jsonl=filename.lower().endswith(".jsonl"))
    return records, report
