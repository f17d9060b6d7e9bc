from __future__ import annotations

import io
import logging
import math
import numbers
import os
import re
from dataclasses import dataclass, fields
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

import pandas as pd

from roster.age import DobValue, datetime_to_serial
from roster.filters import FilterState, apply_filters, normalize_filters


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1]
DEFAULT_FILE = os.environ.get("STUDENT_DASHBOARD_FILE", "Student India 64913.xlsx")

RECORD_COLUMNS = ["name", "gender", "cat", "board", "medium", "city", "district", "state", "dob"]
# Suffixes the file picker offers; legacy .xls would need xlrd, which is not installed.
UPLOAD_TYPES = ["xlsx", "csv"]

# Header variants seen in exported sheets -> canonical field names.
RECORD_COLUMN_ALIASES = {
    "Name": "name",
    "Student Name": "name",
    "Gender": "gender",
    "Sex": "gender",
    "Cat": "cat",
    "Category": "cat",
    "Board": "board",
    "Medium": "medium",
    "City": "city",
    "District": "district",
    "State": "state",
    "DOB": "dob",
    "Dob": "dob",
    "Date of Birth": "dob",
    "Date Of Birth": "dob",
}

_PLAIN_NUMBER_RE = re.compile(r"^[+-]?\d+(\.\d+)?$")

Source = Union[str, Path, io.BytesIO]


@dataclass(frozen=True)
class StudentRecord:
    name: str = ""
    gender: str = ""
    cat: str = ""
    board: str = ""
    medium: str = ""
    city: str = ""
    district: str = ""
    state: str = ""
    dob: str = ""

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> "StudentRecord":
        raw = {RECORD_COLUMN_ALIASES.get(str(k).strip(), str(k).strip()): v for k, v in (raw or {}).items()}
        return cls(**{f.name: as_text(raw.get(f.name)) for f in fields(cls)})


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def as_text(value: object) -> str:
    """Coerce any cell value into a trimmed string; missing values become ''."""
    if _is_missing(value):
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, numbers.Real):
        f = float(value)
        if math.isfinite(f) and f.is_integer():
            return str(int(f))
        return str(value).strip()
    try:
        return str(value).strip()
    except Exception:
        return ""


def classify_dob(value: object) -> DobValue:
    if _is_missing(value):
        return DobValue.absent()
    if isinstance(value, bool):
        return DobValue.textual(str(value))
    if isinstance(value, (datetime, date)):
        return DobValue.numeric(datetime_to_serial(value), text=as_text(value))
    if isinstance(value, numbers.Real):
        f = float(value)
        if not math.isfinite(f):
            return DobValue.absent()
        return DobValue.numeric(f, text=as_text(value))
    text = as_text(value)
    if not text:
        return DobValue.absent()
    if _PLAIN_NUMBER_RE.match(text):
        return DobValue.numeric(float(text), text=text)
    return DobValue.textual(text)


def normalize_row(raw: Mapping[str, object]) -> Optional[StudentRecord]:
    """Normalize one loosely typed record; None when it has no name."""
    record = StudentRecord.from_mapping(raw)
    return record if record.name else None


def empty_dataset() -> pd.DataFrame:
    df = pd.DataFrame({c: pd.Series(dtype=object) for c in RECORD_COLUMNS})
    df["dob_kind"] = pd.Series(dtype=object)
    df["dob_serial"] = pd.Series(dtype=float)
    return df


def rename_record_columns(df: pd.DataFrame) -> pd.DataFrame:
    renamed = {}
    for col in df.columns:
        key = str(col).strip()
        renamed[col] = RECORD_COLUMN_ALIASES.get(key, key)
    df = df.rename(columns=renamed)
    # Two headers mapping to one field: the first wins.
    return df.loc[:, ~df.columns.duplicated()]


def normalize_records(raw: pd.DataFrame) -> pd.DataFrame:
    """Coerce a parsed sheet into the fixed-shape dataset.

    Every record column ends up as a trimmed string ('' when absent), the
    date of birth is tagged numeric/textual/absent, and rows without a name
    are dropped.
    """
    if raw is None or raw.empty:
        return empty_dataset()

    df = rename_record_columns(raw)
    out = pd.DataFrame(index=df.index)
    for col in RECORD_COLUMNS:
        if col in df.columns:
            out[col] = df[col].map(as_text).astype(object)
        else:
            out[col] = ""

    source_dob = df["dob"] if "dob" in df.columns else pd.Series(None, index=df.index, dtype=object)
    dobs = [classify_dob(v) for v in source_dob]
    out["dob_kind"] = [d.kind for d in dobs]
    out["dob_serial"] = pd.Series([d.serial for d in dobs], index=df.index, dtype=float)

    before = len(out)
    out = out[out["name"] != ""].reset_index(drop=True)
    logger.debug("normalized %d rows, dropped %d without a name", len(out), before - len(out))
    return out


def records_from_frame(df: pd.DataFrame) -> List[StudentRecord]:
    if df.empty:
        return []
    return [StudentRecord(*row) for row in df[RECORD_COLUMNS].itertuples(index=False, name=None)]


# ---------------- Loaders ----------------
def is_csv_name(filename: str) -> bool:
    return str(filename).lower().endswith(".csv")


def read_records(source: Source, filename: str) -> pd.DataFrame:
    """Parse a CSV (header row, every cell as text) or the first workbook sheet."""
    if is_csv_name(filename):
        return pd.read_csv(source, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    return pd.read_excel(source, sheet_name=0, dtype=object)


def load_upload(filename: str, data: bytes) -> pd.DataFrame:
    raw = read_records(io.BytesIO(data), filename)
    return normalize_records(raw)


def resolve_default_source(path: Optional[Union[str, Path]] = None) -> Union[str, Path]:
    target = str(path) if path is not None else DEFAULT_FILE
    if re.match(r"^https?://", target, flags=re.IGNORECASE):
        return target
    p = Path(target)
    return p if p.is_absolute() else DATA_DIR / p


def auto_load(path: Optional[Union[str, Path]] = None) -> Optional[pd.DataFrame]:
    """Try the configured default file; None when it cannot be loaded."""
    source = resolve_default_source(path)
    try:
        raw = read_records(source, str(source))
        return normalize_records(raw)
    except Exception:
        logger.info("Auto-load skipped. Use the file picker.")
        logger.debug("auto-load of %s failed", source, exc_info=True)
        return None


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def column_values(df: pd.DataFrame, col: str) -> pd.Series:
    """Non-empty string values of one record column."""
    if df.empty or col not in df.columns:
        return pd.Series(dtype=object)
    s = df[col].astype(str)
    return s[s != ""]


def prepare_context(filters: dict | FilterState | None, dataset: pd.DataFrame) -> Dict[str, object]:
    filt = filters if isinstance(filters, FilterState) else normalize_filters(filters or {})
    dataset = dataset if dataset is not None else empty_dataset()
    filtered = apply_filters(dataset, filt)
    return {
        "filters": filt,
        "dataset": dataset,
        "filtered": filtered,
    }
