"""
Record Loader — turns an uploaded file into the raw array of customer records.

Failures are raised once here, at the boundary, and nothing is analysed:
    wrong file type        → UnsupportedFileTypeError
    undecodable / bad JSON → RecordLoadError
    top level not an array → RecordLoadError
"""

import json
from pathlib import Path
from typing import Any, Optional, Union

JSON_CONTENT_TYPE = "application/json"
JSON_EXTENSION = ".json"

WRONG_FILE_TYPE = "Please select a JSON file"
NOT_AN_ARRAY = "JSON file must contain an array of customer records"


class UnsupportedFileTypeError(ValueError):
    """Upload is neither typed nor named as JSON."""


class RecordLoadError(ValueError):
    """Upload content could not be turned into an array of records."""


def check_file_type(filename: Optional[str], content_type: Optional[str]) -> None:
    if content_type != JSON_CONTENT_TYPE and not (filename or "").endswith(JSON_EXTENSION):
        raise UnsupportedFileTypeError(WRONG_FILE_TYPE)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Unexpected token {name}")


def parse_records(text: str) -> list[Any]:
    """Strict JSON: the NaN and Infinity literals are rejected."""
    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        raise RecordLoadError(f"Invalid JSON: {exc}") from exc

    return ensure_record_array(data)


def ensure_record_array(data: Any) -> list[Any]:
    if not isinstance(data, list):
        raise RecordLoadError(NOT_AN_ARRAY)
    return data


def load_records(content: Union[bytes, str]) -> list[Any]:
    """Decode UTF-8 file content (a leading BOM is allowed) and parse the record array."""
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise RecordLoadError(f"File is not valid UTF-8: {exc}") from exc
    return parse_records(content)


def load_records_from_path(path: Union[str, Path]) -> list[Any]:
    path = Path(path)
    check_file_type(path.name, None)
    return load_records(path.read_bytes())
