from __future__ import annotations

from datetime import datetime, timezone

import pandas as pd
import pytest

from roster.data import normalize_records

NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def raw_students() -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"name": " Asha ", "gender": "F", "cat": "GEN", "board": "CBSE", "medium": "English",
             "city": "Pune", "district": "Pune", "state": "Maharashtra", "dob": "13-Jan-98"},
            {"name": "Ravi", "gender": "M", "cat": "OBC", "board": "ICSE", "medium": "Hindi",
             "city": "Indore", "district": "Indore", "state": "Madhya Pradesh", "dob": "02/03/2010"},
            {"name": "Meera", "gender": "F", "cat": "GEN", "board": "CBSE", "medium": "English",
             "city": "Nagpur", "district": "Nagpur", "state": "Maharashtra", "dob": 36000},
            {"name": "Kiran", "gender": "M", "cat": "SC", "board": "State Board", "medium": "Marathi",
             "city": "Mumbai", "district": "Mumbai City", "state": "Maharashtra", "dob": "not a date"},
            {"name": "", "gender": "F", "cat": "ST", "board": "CBSE", "medium": "English",
             "city": "Delhi", "district": "New Delhi", "state": "Delhi", "dob": "01-Feb-01"},
            {"name": None, "gender": "M", "cat": "GEN", "board": "CBSE", "medium": "English",
             "city": "Patna", "district": "Patna", "state": "Bihar", "dob": None},
        ]
    )


@pytest.fixture
def students(raw_students) -> pd.DataFrame:
    return normalize_records(raw_students)
