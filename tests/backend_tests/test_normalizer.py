import pytest

from normalizer import (
    normalize_days,
    normalize_difficulty,
    normalize_weekday,
    normalize_weight,
    split_list,
)


class TestSplitList:
    def test_comma_string(self):
        assert split_list("Trees, Graphs,Sorting") == ["Trees", "Graphs", "Sorting"]

    def test_semicolons_and_newlines(self):
        assert split_list("Trees;Graphs\nSorting") == ["Trees", "Graphs", "Sorting"]

    def test_list_input_stripped(self):
        assert split_list([" SQL ", "Indexing", ""]) == ["SQL", "Indexing"]

    def test_duplicates_dropped_in_order(self):
        assert split_list("B, A, B, A, C") == ["B", "A", "C"]

    @pytest.mark.parametrize("raw", [None, "", "  ", [], ",,;"])
    def test_empty(self, raw):
        assert split_list(raw) == []


class TestNormalizeWeekday:
    @pytest.mark.parametrize("raw,expected", [
        ("Monday", "Monday"),
        ("monday", "Monday"),
        ("MON", "Monday"),
        ("tue", "Tuesday"),
        ("Tues", "Tuesday"),
        ("thurs", "Thursday"),
        ("  friday ", "Friday"),
        ("sun", "Sunday"),
        ("sat", "Saturday"),
    ])
    def test_known(self, raw, expected):
        assert normalize_weekday(raw) == expected

    @pytest.mark.parametrize("raw", ["", None, "t", "s", "Funday", "Mon1", "Mondays"])
    def test_unknown_or_ambiguous(self, raw):
        assert normalize_weekday(raw) is None


class TestNormalizeDays:
    def test_mixed(self):
        result = normalize_days(["mon", "Wednesday", "Funday", "MONDAY"])
        assert result == {"valid": ["Monday", "Wednesday"], "invalid": ["Funday"]}

    def test_comma_string(self):
        assert normalize_days("Sat, Sun")["valid"] == ["Saturday", "Sunday"]

    def test_empty(self):
        assert normalize_days([]) == {"valid": [], "invalid": []}


class TestNormalizeDifficulty:
    def test_case_insensitive(self):
        assert normalize_difficulty("HARD") == "hard"

    def test_blank_uses_default(self):
        assert normalize_difficulty("", "medium") == "medium"
        assert normalize_difficulty(None, "medium") == "medium"

    def test_unknown(self):
        assert normalize_difficulty("extreme", "medium") is None


class TestNormalizeWeight:
    @pytest.mark.parametrize("raw,expected", [
        (80, 80),
        ("75", 75),
        (40.0, 40),
        (1, 1),
        (100, 100),
    ])
    def test_valid(self, raw, expected):
        assert normalize_weight(raw) == expected

    @pytest.mark.parametrize("raw", [None, 0, 101, -1, 55.5, "heavy", True, [], float("nan"), 10 ** 400])
    def test_invalid_falls_back_to_50(self, raw):
        assert normalize_weight(raw) == 50
