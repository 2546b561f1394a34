"""Tests for requirement validation."""

from __future__ import annotations

from ability_engine.engine.requirements import check_requirements
from ability_engine.models import AbilityRequirements, RequirementKind


class TestCheckRequirements:
    """Tests for check_requirements."""

    def test_no_requirements_pass(self) -> None:
        assert check_requirements(1, None, set(), AbilityRequirements()) is None

    def test_level_too_low(self) -> None:
        failure = check_requirements(2, "mage", set(), AbilityRequirements(min_level=3))

        assert failure is not None
        assert failure.kind == RequirementKind.LEVEL
        assert "3" in failure.message

    def test_class_not_allowed(self) -> None:
        reqs = AbilityRequirements(class_ids=("mage", "cleric"))

        failure = check_requirements(5, "warrior", set(), reqs)

        assert failure is not None
        assert failure.kind == RequirementKind.CLASS

    def test_classless_character_fails_allow_list(self) -> None:
        failure = check_requirements(5, None, set(), AbilityRequirements(class_ids=("mage",)))

        assert failure is not None
        assert failure.kind == RequirementKind.CLASS

    def test_empty_allow_list_allows_any_class(self) -> None:
        assert check_requirements(5, "warrior", set(), AbilityRequirements()) is None

    def test_missing_feature(self) -> None:
        reqs = AbilityRequirements(feature_ids=("feat-a", "feat-b"))

        failure = check_requirements(5, None, {"feat-a"}, reqs)

        assert failure is not None
        assert failure.kind == RequirementKind.FEATURE
        assert failure.missing == ("feat-b",)

    def test_all_requirements_met(self) -> None:
        reqs = AbilityRequirements(min_level=3, class_ids=("mage",), feature_ids=("feat-a",))

        assert check_requirements(3, "mage", ["feat-a", "feat-z"], reqs) is None

    def test_level_reported_before_feature(self) -> None:
        """Test a low-level character missing a feature is told about level first."""
        reqs = AbilityRequirements(min_level=5, class_ids=("mage",), feature_ids=("feat-a",))

        failure = check_requirements(1, "warrior", set(), reqs)

        assert failure is not None
        assert failure.kind == RequirementKind.LEVEL

    def test_class_reported_before_feature(self) -> None:
        reqs = AbilityRequirements(class_ids=("mage",), feature_ids=("feat-a",))

        failure = check_requirements(10, "warrior", set(), reqs)

        assert failure is not None
        assert failure.kind == RequirementKind.CLASS
