"""Tests for request batching."""

import pytest

from langbly_sync.translation.batching import batch_strings, count_characters


def test_character_budget_splits_batches():
    assert batch_strings(["hello", "world", "foo"], max_items=50, max_chars=8) == [
        ["hello"],
        ["world", "foo"],
    ]


def test_item_limit_splits_batches():
    strings = [f"s{i}" for i in range(5)]
    assert batch_strings(strings, max_items=2, max_chars=1000) == [["s0", "s1"], ["s2", "s3"], ["s4"]]


def test_oversized_string_goes_alone():
    long_text = "x" * 20
    batches = batch_strings(["a", long_text, "b"], max_items=50, max_chars=10)
    assert batches == [["a"], [long_text], ["b"]]


def test_batches_concatenate_to_input_and_respect_limits():
    strings = [("word " * (i % 7)).strip() or "w" for i in range(137)]
    batches = batch_strings(strings, max_items=10, max_chars=60)
    assert [s for batch in batches for s in batch] == strings
    for batch in batches:
        assert 1 <= len(batch) <= 10
        assert count_characters(batch) <= 60 or len(batch) == 1


def test_empty_input_gives_no_batches():
    assert batch_strings([]) == []


def test_defaults_fit_many_small_strings_in_one_request():
    assert len(batch_strings(["hi"] * 50)) == 1
    assert len(batch_strings(["hi"] * 51)) == 2


@pytest.mark.parametrize("kwargs", [{"max_items": 0}, {"max_chars": 0}])
def test_invalid_limits_are_rejected(kwargs):
    with pytest.raises(ValueError):
        batch_strings(["a"], **kwargs)


def test_count_characters():
    assert count_characters(["ab", "", "cde"]) == 5
