from __future__ import annotations

import pandas as pd

from roster.aggregates import AGE_BUCKET_LABELS, age_buckets, age_histogram, distinct_values, top_n_counts


def _frame(**cols):
    return pd.DataFrame(cols)


def test_distinct_values_sorted_without_blanks(students):
    assert distinct_values(students, "state") == ["Madhya Pradesh", "Maharashtra"]
    df = _frame(board=["state", "", "CBSE", "icse", "CBSE"])
    assert distinct_values(df, "board") == ["CBSE", "icse", "state"]


def test_distinct_values_missing_column():
    assert distinct_values(_frame(name=["A"]), "board") == []


def test_top_n_counts_descending_with_stable_ties():
    df = _frame(state=["Goa", "Bihar", "Goa", "", "Assam", "Bihar", "Kerala", "Goa"])
    assert top_n_counts(df, "state") == [("Goa", 3), ("Bihar", 2), ("Assam", 1), ("Kerala", 1)]


def test_top_n_counts_truncates_and_accounts_for_all_values():
    values = ["a"] * 5 + ["b"] * 4 + ["c"] * 3 + ["d"] * 2 + ["e"] + ["", ""]
    df = _frame(cat=values)
    top = top_n_counts(df, "cat", n=3)
    assert top == [("a", 5), ("b", 4), ("c", 3)]
    counts = [c for _, c in top]
    assert counts == sorted(counts, reverse=True)
    rest = sum(c for _, c in top_n_counts(df, "cat", n=100)[3:])
    assert sum(counts) + rest == len([v for v in values if v])


def test_top_n_counts_empty():
    assert top_n_counts(_frame(gender=["", ""]), "gender") == []
    assert top_n_counts(pd.DataFrame(), "gender") == []


def test_age_buckets_boundaries():
    ages = pd.Series([0, 10, 11, 15, 16, 20, 25, 30, 35, 40, 45, 50, 51, 60, 61, 100, None], dtype="Int64")
    counts = age_buckets(ages)
    assert list(counts.index) == AGE_BUCKET_LABELS
    assert counts.tolist() == [2, 2, 2, 1, 1, 1, 1, 1, 1, 2, 2]


def test_age_histogram_skips_unknown(students, now):
    hist = age_histogram(students, now=now)
    assert [label for label, _ in hist] == AGE_BUCKET_LABELS
    assert dict(hist)["16–20"] == 1
    assert dict(hist)["26–30"] == 2
    # Kiran's date of birth cannot be parsed
    assert sum(c for _, c in hist) == 3


def test_age_histogram_empty():
    assert age_histogram(pd.DataFrame()) == [(label, 0) for label in AGE_BUCKET_LABELS]


def test_age_histogram_without_dob_columns(now):
    hist = age_histogram(pd.DataFrame({"name": ["A"], "gender": ["F"]}), now=now)
    assert hist == [(label, 0) for label in AGE_BUCKET_LABELS]
