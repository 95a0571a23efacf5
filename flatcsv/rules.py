"""
Export rules shared by the engine, the service and the CLI.

Kept as plain constants so the defaults are visible in one place.
"""

DEFAULT_SEPARATOR = ","

# Category used by the binarizer for cells that hold no value.
NA_CATEGORY = "na"
BINARY_ON = "1"
BINARY_OFF = "0"
BINARY_NAME_SEPARATOR = ":"

# Service output is UTF-8 with BOM so spreadsheet tools pick the encoding up.
TARGET_ENCODING = "utf-8-sig"
FILE_ENCODING = "utf-8"

ACCEPTED_SUFFIXES = (".json", ".jsonl")
