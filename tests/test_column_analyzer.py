"""
Unit tests for column type inference
"""

from clustering_workbench.core.data_models import ColumnKind
from clustering_workbench.preprocessing.column_analyzer import analyze_columns


class TestAnalyzeColumns:
    """Test cases for analyze_columns"""

    def test_mixed_dataset(self, mixed_dataset):
        """Test numeric strings are numeric and empty columns are skipped"""
        types = analyze_columns(mixed_dataset)

        assert types.numeric == ["age", "income"]
        assert types.categorical == ["city", "grade"]
        assert "notes" not in types.numeric + types.categorical
        assert "id" not in types.numeric

    def test_categorical_cardinality_uses_full_column(self):
        dataset = [{"c": "a"}, {"c": "b"}, {"c": "c"}, {"c": "d"}]

        types = analyze_columns(dataset, sample_size=2)

        profile = types.profiles[0]
        assert profile.kind == ColumnKind.CATEGORICAL
        assert profile.cardinality == 4
        assert profile.sampled_values == 2

    def test_sample_limited_to_leading_rows(self):
        """Test a non-numeric value past the sample does not change the kind"""
        dataset = [{"v": i} for i in range(5)] + [{"v": "oops"}]

        types = analyze_columns(dataset, sample_size=5)

        assert types.numeric == ["v"]

    def test_single_text_value_makes_column_categorical(self):
        dataset = [{"v": 1}, {"v": "two"}, {"v": 3}]

        types = analyze_columns(dataset)

        assert types.categorical == ["v"]
        assert types.numeric == []

    def test_column_null_in_sample_is_skipped(self):
        dataset = [{"v": None}, {"v": ""}, {"v": 5}]

        types = analyze_columns(dataset, sample_size=2)

        assert types.numeric == []
        assert types.categorical == []

    def test_empty_dataset(self):
        types = analyze_columns([])

        assert types.numeric == []
        assert types.categorical == []
