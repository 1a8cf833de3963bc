import json
import logging
import math
import numbers
import re
from datetime import date, datetime
from pathlib import Path
import pandas as pd

from .exceptions import DataLoadError

logger = logging.getLogger(__name__)

# Leading numeric prefix, the way spreadsheet exports write numbers ("1234.5", "-3", ".5", "1e3").
_NUMBER_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_FILE_DATE = re.compile(r"(\d{4}-\d{2}-\d{2})")
_ISO_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")


def clean_number(value) -> float:
    """
    Coerces a number-like value into a finite float.
    - Strings may carry ',' thousands separators: "1,234.5" -> 1234.5
    - Only the leading numeric part of a string is read: "12 units" -> 12.0
    - None, empty strings, NaN, infinities and anything unparseable -> 0.0
    """
    if isinstance(value, bool):
        return 0.0

    if isinstance(value, str):
        match = _NUMBER_PREFIX.match(value.replace(",", ""))
        if not match:
            return 0.0
        result = float(match.group(0))
    elif isinstance(value, numbers.Real):
        result = float(value)
    else:
        return 0.0

    if not math.isfinite(result):
        return 0.0
    return result


def parse_iso_date(value) -> date | None:
    """
    Returns the calendar date of an ISO-8601 value, or None when it isn't one.
    Date-times keep the date as written; there is no timezone conversion.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        # NaT is a datetime subclass that never equals itself
        if value != value:
            return None
        return value.date()

    if isinstance(value, date):
        return value

    if not isinstance(value, str):
        return None

    text = value.strip()
    if not _ISO_DATE_PREFIX.match(text):
        return None

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    # Date-times, including the "2025-01-10T00:00:00.000Z" form of JS exports
    parsed = pd.to_datetime(text, format="ISO8601", errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date()


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def find_latest_report(directory: Path, prefix: str) -> tuple[Path, date] | None:
    """
    Finds the most recent '<prefix>YYYY-MM-DD.*' file in a directory.
    Returns the path together with the date parsed from its name.
    """
    candidates = []
    for path in Path(directory).glob(f"{prefix}*"):
        match = _FILE_DATE.search(path.name[len(prefix):])
        if not match:
            continue
        file_date = parse_iso_date(match.group(1))
        if file_date is not None:
            candidates.append((file_date, path))

    if not candidates:
        return None

    file_date, path = max(candidates, key=lambda item: item[0])
    return path, file_date


def load_csv(file_path: Path) -> pd.DataFrame:
    """
    CSV loader with an encoding fallback:
    1. UTF-8 with BOM support ('utf-8-sig')
    2. Latin-1, which can read any byte
    """
    try:
        return pd.read_csv(file_path, encoding="utf-8-sig")
    except UnicodeDecodeError:
        logger.info(
            f"UTF-8 decoding failed for {file_path.name}. Retrying with 'latin-1'."
        )
        try:
            return pd.read_csv(file_path, encoding="latin-1")
        except (OSError, ValueError) as e:
            raise DataLoadError(f"Could not read {file_path.name}: {e}") from e
    except FileNotFoundError as e:
        raise DataLoadError(f"Report not found at {file_path}") from e
    except (OSError, ValueError) as e:
        raise DataLoadError(f"Could not read {file_path.name}: {e}") from e


def load_json_records(file_path: Path) -> list[dict]:
    """Loads a JSON snapshot holding a list of records (or {"records": [...]})."""
    try:
        with open(file_path, encoding="utf-8") as f:
            payload = json.load(f)
    except FileNotFoundError as e:
        raise DataLoadError(f"Snapshot not found at {file_path}") from e
    except (OSError, ValueError) as e:
        raise DataLoadError(f"Could not read {file_path.name}: {e}") from e

    if isinstance(payload, dict):
        payload = payload.get("records", [])
    if not isinstance(payload, list):
        raise DataLoadError(f"{file_path.name} does not contain a list of records")
    return payload
