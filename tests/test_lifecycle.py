from datetime import timedelta

import pytest

from b2buckets.base.exceptions import (
    FieldValidationError,
    IncompatibleFieldsError,
    LifecycleConflictError,
    MissingFieldError,
)
from b2buckets.domain.lifecycle import LifecycleRule, detect_conflicts, find_prefix_conflicts
from b2buckets.domain.names import validate_file_name_prefix


def _rules(prefixes):
    return [LifecycleRule(p, delete_after_days=5) for p in prefixes]


class TestLifecycleRule:
    def test_hide_only(self):
        rule = LifecycleRule("logs/", hide_after_days=7)
        assert rule.hide_after_days == 7
        assert rule.delete_after_days is None

    def test_needs_one_action(self):
        with pytest.raises(IncompatibleFieldsError) as exc_info:
            LifecycleRule("logs/")
        assert exc_info.value.report == {"logs/": ["hide_after_days", "delete_after_days"]}

    @pytest.mark.parametrize("days", [0, -1, 65536])
    def test_day_range(self, days):
        with pytest.raises(FieldValidationError) as exc_info:
            LifecycleRule("logs/", hide_after_days=days)
        assert exc_info.value.field == "hide_after_days"

    def test_accepts_timedelta(self):
        rule = LifecycleRule("logs/", delete_after_days=timedelta(days=3, hours=5))
        assert rule.delete_after_days == 3

    def test_ordering_by_prefix(self):
        assert sorted(_rules(["b/", "a/"])) == _rules(["a/", "b/"])


class TestLifecycleRuleBuilder:
    def test_build(self):
        rule = (
            LifecycleRule.builder()
            .filename_prefix("my-files/")
            .delete_after_hide(timedelta(days=5))
            .build()
        )
        assert rule == LifecycleRule("my-files/", delete_after_days=5)

    def test_missing_prefix(self):
        with pytest.raises(MissingFieldError) as exc_info:
            LifecycleRule.builder().hide_after_upload(1).build()
        assert exc_info.value.field == "prefix"

    def test_missing_action(self):
        with pytest.raises(IncompatibleFieldsError):
            LifecycleRule.builder().filename_prefix("x/").build()

    def test_setter_fails_fast(self):
        with pytest.raises(FieldValidationError):
            LifecycleRule.builder().hide_after_upload(0)


class TestFileNamePrefix:
    @pytest.mark.parametrize("prefix", ["", "Docs/", "a/b/c", "ünïcode/"])
    def test_valid(self, prefix):
        assert validate_file_name_prefix(prefix) == prefix

    @pytest.mark.parametrize("prefix", [
        "/leading", "a//b", "back\\slash", "tab\there", "del\x7f", "x" * 1025, "y" * 251,
    ])
    def test_invalid(self, prefix):
        with pytest.raises(FieldValidationError):
            validate_file_name_prefix(prefix)


class TestDetectConflicts:
    def test_disjoint_prefixes(self):
        rules = _rules(["Legal/", "Archive/", "Docs/"])
        assert [r.prefix for r in detect_conflicts(rules)] == ["Archive/", "Docs/", "Legal/"]

    def test_sibling_conflicts(self):
        prefixes = ["Docs/Photos/", "Legal/", "Legal/Taxes/", "Archive/", "Archive/Temporary/"]
        with pytest.raises(LifecycleConflictError) as exc_info:
            detect_conflicts(_rules(prefixes))
        assert exc_info.value.conflicts == {
            "Legal/": ["Legal/Taxes/"],
            "Archive/": ["Archive/Temporary/"],
        }
        assert list(exc_info.value.conflicts) == ["Archive/", "Legal/"]

    def test_nested_conflicts_listed_under_each_ancestor(self):
        prefixes = [
            "Docs/Photos/", "Docs/", "Docs/Documents/", "Legal/Taxes/",
            "Docs/Photos/Vacations/", "Archive/",
        ]
        with pytest.raises(LifecycleConflictError) as exc_info:
            detect_conflicts(_rules(prefixes))
        assert exc_info.value.conflicts == {
            "Docs/": ["Docs/Documents/", "Docs/Photos/", "Docs/Photos/Vacations/"],
            "Docs/Photos/": ["Docs/Photos/Vacations/"],
        }

    def test_empty_prefix_alone(self):
        assert detect_conflicts(_rules([""])) == _rules([""])

    def test_empty_prefix_conflicts_with_everything(self):
        with pytest.raises(LifecycleConflictError) as exc_info:
            detect_conflicts(_rules(["b/", "", "a/"]))
        assert exc_info.value.conflicts == {"": ["a/", "b/"]}

    def test_identical_prefixes(self):
        assert find_prefix_conflicts(["p", "p"]) == {"p": ["p"]}
        with pytest.raises(LifecycleConflictError):
            detect_conflicts(_rules(["p", "p"]))

    def test_too_many_rules(self):
        rules = _rules([f"dir{i:03d}/" for i in range(101)])
        with pytest.raises(FieldValidationError) as exc_info:
            detect_conflicts(rules)
        assert exc_info.value.field == "lifecycle_rules"

    def test_hundred_rules_allowed(self):
        rules = _rules([f"dir{i:03d}/" for i in range(100)])
        assert len(detect_conflicts(rules)) == 100

    def test_rejects_non_rules(self):
        with pytest.raises(FieldValidationError):
            detect_conflicts(["Docs/"])

    def test_deterministic(self):
        prefixes = ["c/", "a/", "a/b/", "c/d/"]
        first = find_prefix_conflicts(prefixes)
        second = find_prefix_conflicts(list(reversed(prefixes)))
        assert list(first.items()) == list(second.items())
