"""Tests for collection name normalization."""

from __future__ import annotations

import pytest

from kdxgen.ingestion.naming import normalize_collection_name


def test_short_path_loses_one_trailing_separator() -> None:
    assert normalize_collection_name("Fiction/") == "Fiction"
    assert normalize_collection_name("Fiction/Classics/") == "Fiction/Classics"
    assert normalize_collection_name("Odd//") == "Odd/"
    assert normalize_collection_name("NoSeparator") == "NoSeparator"


def test_path_of_exact_limit_is_kept() -> None:
    path = "a" * 47 + "/"

    assert normalize_collection_name(path) == "a" * 47


def test_long_path_is_truncated_with_ellipsis() -> None:
    path = "very/long/nested/path/exceeding/forty/eight/chars/"

    name = normalize_collection_name(path)

    assert len(name) == 48
    assert name == path[:45] + "..."


@pytest.mark.parametrize("max_length", [4, 10, 20, 60])
def test_truncated_length_matches_limit(max_length: int) -> None:
    path = "x/" * 40

    name = normalize_collection_name(path, max_length)

    assert len(name) == max_length
    assert name.endswith("...")


def test_distinct_long_paths_can_collide() -> None:
    first = normalize_collection_name("very/long/nested/path/exceeding/forty/eight/chars/")
    second = normalize_collection_name("very/long/nested/path/exceeding/forty/eight/chars/other/")

    assert first == second
