from __future__ import annotations

import math
from typing import Any, Dict

import pandas as pd

from roster.data import RECORD_COLUMNS

TABLE_HEADERS = ["Name", "Gender", "Category", "Board", "Medium", "City", "District", "State", "DOB"]
DEFAULT_PAGE_SIZE = 10


def table_frame(view: pd.DataFrame) -> pd.DataFrame:
    """The filtered view as nine string columns under the display headers."""
    if view.empty:
        return pd.DataFrame(columns=TABLE_HEADERS)
    df = view.reindex(columns=RECORD_COLUMNS, fill_value="")
    df.columns = TABLE_HEADERS
    return df.reset_index(drop=True)


def compute_table(ctx: Dict[str, Any], *, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
    view: pd.DataFrame = ctx.get("filtered", pd.DataFrame())
    page_size = max(1, int(page_size))
    total = int(len(view))
    page_count = max(1, math.ceil(total / page_size))
    page = max(1, min(int(page), page_count))
    start = (page - 1) * page_size
    rows = table_frame(view).iloc[start:start + page_size]
    return {
        "columns": TABLE_HEADERS,
        "rows": rows.values.tolist(),
        "page": page,
        "page_size": page_size,
        "page_count": page_count,
        "total": total,
    }


def export_csv(view: pd.DataFrame) -> bytes:
    return table_frame(view).to_csv(index=False).encode("utf-8")
