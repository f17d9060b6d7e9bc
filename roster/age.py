from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Literal, Optional

import pandas as pd


DobKind = Literal["numeric", "textual", "absent"]

# Spreadsheet serial dates count days from this epoch.
EXCEL_EPOCH = datetime(1899, 12, 30, tzinfo=timezone.utc)
DAYS_PER_YEAR = 365.25
MIN_AGE = 0
MAX_AGE = 100

_DOB_STRIP_RE = re.compile(r"[^0-9A-Za-z\-/ ]")
_FOUR_DIGIT_RE = re.compile(r"\d{4}")
_SHORT_NUMBER_RE = re.compile(r"(?<!\d)\d{1,2}(?!\d)")


@dataclass(frozen=True)
class DobValue:
    kind: DobKind = "absent"
    serial: Optional[float] = None
    text: str = ""

    @classmethod
    def numeric(cls, serial: float, text: str = "") -> "DobValue":
        return cls(kind="numeric", serial=float(serial), text=text)

    @classmethod
    def textual(cls, text: str) -> "DobValue":
        return cls(kind="textual", serial=None, text=text)

    @classmethod
    def absent(cls) -> "DobValue":
        return cls()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def serial_to_datetime(serial: float) -> Optional[datetime]:
    if serial is None or not math.isfinite(serial):
        return None
    try:
        return EXCEL_EPOCH + timedelta(days=float(serial))
    except OverflowError:
        return None


def datetime_to_serial(value: date) -> float:
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    delta = _as_utc(value) - EXCEL_EPOCH
    return delta.total_seconds() / 86400.0


def _back_one_century(value: datetime) -> datetime:
    try:
        return value.replace(year=value.year - 100)
    except ValueError:
        # Feb 29 in a year that is not a leap year one century earlier.
        return value.replace(year=value.year - 100, day=28)


def _has_two_digit_year(cleaned: str, parsed: datetime) -> bool:
    if _FOUR_DIGIT_RE.search(cleaned):
        return False
    short = [int(tok) for tok in _SHORT_NUMBER_RE.findall(cleaned)]
    # A lone number is the day ("15-Dec", "Jan 30"); the year needs a second one.
    return len(short) >= 2 and parsed.year % 100 in short


def parse_dob_text(text: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """Parse a free-form date of birth such as ``13-Jan-98``.

    Characters other than digits, letters, hyphen, slash and space are
    dropped before parsing. Two-digit years never resolve into the future:
    when the text carries a two-digit year and the parsed date lies after
    ``now``, it is moved back one century. Text without a year is left as
    parsed.
    """
    now = _as_utc(now) if now is not None else _utc_now()
    cleaned = _DOB_STRIP_RE.sub("", text or "").strip()
    if not cleaned:
        return None
    try:
        parsed = pd.to_datetime(cleaned, errors="coerce")
    except (ValueError, OverflowError, TypeError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    out = _as_utc(parsed.to_pydatetime())
    if out > now and _has_two_digit_year(cleaned, out):
        out = _back_one_century(out)
    return out


def dob_to_datetime(dob: DobValue, now: Optional[datetime] = None) -> Optional[datetime]:
    if dob.kind == "numeric":
        return serial_to_datetime(dob.serial)
    if dob.kind == "textual":
        return parse_dob_text(dob.text, now=now)
    return None


def estimate_age(dob: DobValue, now: Optional[datetime] = None) -> Optional[int]:
    """Approximate age in whole years, or None when unknown.

    Elapsed time is converted with a 365.25-day year and floored. Ages outside
    [0, 100] are treated as misparses and reported as unknown.
    """
    now = _as_utc(now) if now is not None else _utc_now()
    born = dob_to_datetime(dob, now=now)
    if born is None:
        return None
    elapsed_days = (now - born).total_seconds() / 86400.0
    age = math.floor(elapsed_days / DAYS_PER_YEAR)
    if age < MIN_AGE or age > MAX_AGE:
        return None
    return int(age)


def dob_values(df: pd.DataFrame) -> list[DobValue]:
    if df.empty:
        return []
    if "dob_kind" not in df.columns:
        return [DobValue.absent()] * len(df)
    serials = df["dob_serial"] if "dob_serial" in df.columns else pd.Series(None, index=df.index, dtype=float)
    texts = df["dob"] if "dob" in df.columns else pd.Series("", index=df.index)
    out: list[DobValue] = []
    for kind, serial, text in zip(df["dob_kind"], serials, texts):
        if kind == "numeric" and serial is not None and pd.notna(serial):
            out.append(DobValue.numeric(float(serial), text=str(text)))
        elif kind == "textual":
            out.append(DobValue.textual(str(text)))
        else:
            out.append(DobValue.absent())
    return out


def estimate_ages(df: pd.DataFrame, now: Optional[datetime] = None) -> pd.Series:
    """Per-record ages as a nullable integer series aligned to ``df``."""
    now = _as_utc(now) if now is not None else _utc_now()
    ages = [estimate_age(dob, now=now) for dob in dob_values(df)]
    return pd.Series(ages, index=df.index, dtype="Int64")
