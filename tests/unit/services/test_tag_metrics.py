"""
Unit tests for the percentage-of-total metric.
"""
import math

import pytest

from app.schemas.tag import TagRecord
from app.services.tag_metrics import derive_percentages
from tests.lib import make_snapshot


def test_percentages_match_count_share(sample_snapshot):
    ranked = derive_percentages(sample_snapshot)

    assert [tag.name for tag in ranked] == ["C#", "Java", "Sqlite"]
    assert ranked[0].percentage == round(2 / 204 * 100, 5)
    assert ranked[2].percentage == pytest.approx(98.03922)


def test_percentages_rounded_to_five_decimals():
    ranked = derive_percentages(make_snapshot([("a", 1), ("b", 2)]))

    assert ranked[0].percentage == 33.33333
    assert ranked[1].percentage == 66.66667


def test_percentages_sum_to_one_hundred():
    snapshot = make_snapshot([(f"tag-{i}", (i * 37) % 101 + 1) for i in range(250)])

    ranked = derive_percentages(snapshot)

    total = sum(tag.percentage for tag in ranked)
    # each value is off by at most 0.000005 after rounding
    assert math.isclose(total, 100.0, abs_tol=250 * 0.000005)


def test_missing_snapshot_yields_empty_list():
    assert derive_percentages(None) == []


def test_empty_snapshot_yields_empty_list():
    assert derive_percentages(make_snapshot([])) == []


def test_all_zero_counts_yield_empty_list():
    ranked = derive_percentages(make_snapshot([("a", 0), ("b", 0)]))

    assert ranked == []


def test_zero_count_tag_gets_zero_percentage():
    ranked = derive_percentages(make_snapshot([("a", 0), ("b", 4)]))

    assert [(tag.name, tag.percentage) for tag in ranked] == [("a", 0.0), ("b", 100.0)]


def test_accepts_plain_record_list():
    ranked = derive_percentages([TagRecord(name="x", count=1), TagRecord(name="y", count=3)])

    assert [tag.percentage for tag in ranked] == [25.0, 75.0]


def test_duplicate_names_are_kept_separately():
    ranked = derive_percentages(make_snapshot([("dup", 1), ("dup", 1)]))

    assert [(tag.name, tag.percentage) for tag in ranked] == [("dup", 50.0), ("dup", 50.0)]
