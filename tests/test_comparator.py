from hostsuite.core import Tolerance
from hostsuite.core.comparator import compare_snapshot, values_equal
from hostsuite.core.expect import any_of_type, object_containing


def test_compare_snapshot_passes_on_subset() -> None:
    snapshot = {"is_loaded": True, "volume": 0.5, "uri": "asset:///a.mp3"}
    result = compare_snapshot(snapshot, {"is_loaded": True, "volume": 0.5})
    assert result.passed
    assert result.mismatches() == []


def test_compare_snapshot_applies_numeric_tolerance() -> None:
    tolerance = Tolerance(absolute=0.01, relative=0.0)
    assert compare_snapshot({"rate": 1.505}, {"rate": 1.5}, tolerance).passed
    assert not compare_snapshot({"rate": 1.6}, {"rate": 1.5}, tolerance).passed


def test_compare_snapshot_reports_missing_and_mismatched_fields() -> None:
    result = compare_snapshot({"is_playing": False}, {"is_playing": True, "position_millis": 0})
    assert not result.passed
    mismatches = result.mismatches()
    assert len(mismatches) == 2
    assert mismatches[0].startswith("is_playing: actual=False expected=True")
    assert mismatches[1] == "position_millis: field missing from status"


def test_compare_snapshot_does_not_treat_bool_as_number() -> None:
    assert not compare_snapshot({"is_muted": 1}, {"is_muted": True}).passed


def test_values_equal_honours_nested_matchers() -> None:
    actual = {"status": {"is_loaded": True, "uri": "x"}, "count": 3}
    expected = {"status": object_containing(is_loaded=True), "count": any_of_type(int)}
    assert values_equal(actual, expected)
    assert not values_equal(actual, {"status": object_containing(is_loaded=False), "count": 3})
    assert values_equal([1, 2.0], (1.0, 2))
    assert not values_equal({"a": 1}, {"a": 1, "b": 2})
