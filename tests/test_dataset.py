"""
Unit tests for dataset helpers
"""

import math

import numpy as np
import pandas as pd
import pytest

from clustering_workbench.core.dataset import (
    coerce_number, column_names, copy_rows, frame_from_records, is_null,
    parse_number, records_from_frame, stringify,
)


class TestValueHelpers:
    """Test cases for null detection and numeric parsing"""

    @pytest.mark.parametrize("value", [None, float("nan"), np.nan, "", "   "])
    def test_is_null_true(self, value):
        assert is_null(value)

    @pytest.mark.parametrize("value", [0, 0.0, "0", "abc", False])
    def test_is_null_false(self, value):
        assert not is_null(value)

    def test_parse_number(self):
        """Test numbers and numeric strings parse; everything else is None"""
        assert parse_number(3) == 3.0
        assert parse_number(" 2.5 ") == 2.5
        assert parse_number("1e3") == 1000.0
        assert parse_number(np.int64(4)) == 4.0
        assert parse_number("abc") is None
        assert parse_number(True) is None
        assert parse_number(None) is None
        assert parse_number(float("inf")) is None
        assert parse_number("nan") is None

    def test_coerce_number(self):
        assert coerce_number("7") == 7.0
        assert coerce_number("x") == 0.0
        assert coerce_number(math.inf) == 0.0

    def test_stringify_integral_float(self):
        assert stringify(2.0) == "2"
        assert stringify(2.5) == "2.5"
        assert stringify("A") == "A"


class TestRowHelpers:
    """Test cases for column discovery and frame conversion"""

    def test_column_names_order_and_reserved(self):
        dataset = [{"id": 0, "b": 1}, {"id": 1, "a": 2, "b": 3, "cluster": 0}]

        assert column_names(dataset) == ["b", "a"]
        assert column_names(dataset, include_reserved=True) == ["id", "b", "a", "cluster"]

    def test_copy_rows_does_not_alias(self):
        dataset = [{"a": 1}]
        copied = copy_rows(dataset)
        copied[0]["a"] = 2

        assert dataset[0]["a"] == 1

    def test_records_from_frame(self):
        """Test NaN cells become None and ids are added"""
        frame = pd.DataFrame({"x": [1.5, np.nan], "name": ["a", None]})

        records = records_from_frame(frame)

        assert records == [
            {"x": 1.5, "name": "a", "id": 0},
            {"x": None, "name": None, "id": 1},
        ]
        assert type(records[0]["x"]) is float

    def test_records_from_frame_keeps_existing_id(self):
        frame = pd.DataFrame({"id": [10, 11], "x": [1, 2]})

        records = records_from_frame(frame)

        assert [r["id"] for r in records] == [10, 11]
        assert type(records[0]["x"]) is int

    def test_frame_from_records(self):
        frame = frame_from_records([{"id": 0, "x": 1}, {"id": 1, "x": 2, "y": "b"}])

        assert list(frame.columns) == ["id", "x", "y"]
        assert len(frame) == 2
