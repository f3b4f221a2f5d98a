"""
Tests for metadata normalization.

Covers canonical, legacy emoji and alias spellings, the safe and strict
flavours, UI-only type passthrough, and configured aliases/defaults.
"""

import pytest

from tasktree.core.config.models import MetadataConfig
from tasktree.core.errors import UnrecognizedValueError
from tasktree.core.metadata import (
    PRIORITY,
    STATUS,
    TYPE,
    WORKFLOW_STATE,
    MetadataNormalizer,
    is_completed_status,
    label_for,
    normalize_key,
    normalize_priority,
    normalize_priority_strict,
    normalize_status,
    normalize_status_strict,
    normalize_type,
    normalize_type_strict,
    normalize_workflow_state,
    normalize_workflow_state_strict,
    priority_order,
    resolve_status,
)
from tasktree.core.tasks.models import TaskPriority, TaskStatus, TaskType, WorkflowState

# ==============================================================================
# Lookup keys
# ==============================================================================


class TestNormalizeKey:
    """Test lookup key normalization."""

    def test_case_and_whitespace(self) -> None:
        """Test that case and runs of whitespace are folded."""
        assert normalize_key("  In   Progress ") == "in progress"

    def test_variation_selector_stripped(self) -> None:
        """Test that emoji presentation selectors do not affect lookup."""
        assert normalize_key("▶️ Medium") == normalize_key("▶ Medium")


# ==============================================================================
# Status
# ==============================================================================


class TestStatus:
    """Test status normalization."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("todo", TaskStatus.TODO),
            ("🟡 To Do", TaskStatus.TODO),
            ("To Do", TaskStatus.TODO),
            ("🔵 In Progress", TaskStatus.IN_PROGRESS),
            ("in-progress", TaskStatus.IN_PROGRESS),
            ("🟢 Done", TaskStatus.DONE),
            ("Completed", TaskStatus.DONE),
            ("🔴 Blocked", TaskStatus.BLOCKED),
            ("⚪ Archived", TaskStatus.ARCHIVED),
            ("🟢", TaskStatus.DONE),
        ],
    )
    def test_known_spellings(self, raw: str, expected: TaskStatus) -> None:
        """Test that every accepted spelling maps to its canonical status."""
        assert normalize_status(raw) == expected

    def test_canonical_names_map_to_themselves(self) -> None:
        """Test that canonical names normalize to themselves."""
        for status in TaskStatus:
            assert normalize_status(status.value) == status
            assert normalize_status(status) == status

    def test_legacy_marker_with_unknown_label(self) -> None:
        """Test that a known emoji marker wins over an unfamiliar label."""
        assert normalize_status("🟢 Shipped") == TaskStatus.DONE

    def test_alphanumeric_head_is_not_split(self) -> None:
        """Test that words are never matched piecemeal."""
        result = resolve_status("not done")
        assert result.was_unrecognized
        assert result.value == "todo"

    def test_unknown_falls_back_to_todo(self) -> None:
        """Test that unknown statuses fall back to the default."""
        result = resolve_status("someday")
        assert result.value == TaskStatus.TODO.value
        assert result.was_unrecognized
        assert result.raw == "someday"

    def test_missing_is_default_without_flag(self) -> None:
        """Test that missing values are not reported as unrecognized."""
        for raw in (None, "", "   "):
            result = resolve_status(raw)
            assert result.value == "todo"
            assert not result.was_unrecognized

    def test_strict_raises(self) -> None:
        """Test that strict normalization rejects unknown values."""
        with pytest.raises(UnrecognizedValueError) as exc_info:
            normalize_status_strict("someday")
        assert exc_info.value.field == STATUS
        assert "todo" in exc_info.value.valid_options
        assert "Valid options are" in str(exc_info.value)

    def test_strict_accepts_legacy(self) -> None:
        """Test that strict normalization accepts legacy spellings."""
        assert normalize_status_strict("🔵 In Progress") == TaskStatus.IN_PROGRESS

    def test_strict_missing_is_default(self) -> None:
        """Test that strict normalization still defaults missing values."""
        assert normalize_status_strict(None) == TaskStatus.TODO

    def test_is_completed_status(self) -> None:
        """Test that only done counts as completed."""
        assert is_completed_status("🟢 Done")
        assert is_completed_status("resolved")
        assert not is_completed_status("archived")
        assert not is_completed_status(None)


# ==============================================================================
# Priority
# ==============================================================================


class TestPriority:
    """Test priority normalization."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("▶️ Medium", TaskPriority.MEDIUM),
            ("▶ Medium", TaskPriority.MEDIUM),
            ("🔼 High", TaskPriority.HIGH),
            ("🔥 Highest", TaskPriority.HIGHEST),
            ("urgent", TaskPriority.HIGHEST),
            ("🔽 Low", TaskPriority.LOW),
            ("P3", TaskPriority.LOW),
        ],
    )
    def test_known_spellings(self, raw: str, expected: TaskPriority) -> None:
        """Test that every accepted spelling maps to its canonical priority."""
        assert normalize_priority(raw) == expected

    def test_missing_and_unknown_default_to_medium(self) -> None:
        """Test that missing or unknown priorities become medium."""
        assert normalize_priority(None) == TaskPriority.MEDIUM
        assert normalize_priority("whenever") == TaskPriority.MEDIUM

    def test_strict_raises(self) -> None:
        """Test that strict priority normalization rejects unknown values."""
        with pytest.raises(UnrecognizedValueError):
            normalize_priority_strict("whenever")

    def test_priority_order(self) -> None:
        """Test numeric sort order across spellings."""
        assert priority_order("🔥 Highest") == 4
        assert priority_order("high") == 3
        assert priority_order("▶️ Medium") == 2
        assert priority_order("low") == 1
        assert priority_order(None) == 0
        assert priority_order("whenever") == 0


# ==============================================================================
# Type and workflow state
# ==============================================================================


class TestType:
    """Test type normalization."""

    def test_known_spellings(self) -> None:
        """Test aliases and emoji labels for types."""
        assert normalize_type("feat") == TaskType.FEATURE
        assert normalize_type("🐛 Bug") == TaskType.BUG
        assert normalize_type("docs") == TaskType.DOCUMENTATION

    def test_ui_only_tag_passes_through(self) -> None:
        """Test that UI-only type tags are kept as-is."""
        assert normalize_type(" enhancement ") == "enhancement"

    def test_missing_defaults_to_chore(self) -> None:
        """Test the default type."""
        assert normalize_type(None) == TaskType.CHORE

    def test_strict_rejects_ui_only_tag(self) -> None:
        """Test that strict type normalization does not pass through."""
        with pytest.raises(UnrecognizedValueError):
            normalize_type_strict("enhancement")


class TestWorkflowState:
    """Test workflow state normalization."""

    def test_known_spellings(self) -> None:
        """Test workflow state aliases."""
        assert normalize_workflow_state("Current") == WorkflowState.CURRENT
        assert normalize_workflow_state("archived") == WorkflowState.ARCHIVE
        assert normalize_workflow_state("now") == WorkflowState.CURRENT

    def test_unknown_defaults_to_backlog(self) -> None:
        """Test the default workflow state."""
        assert normalize_workflow_state("limbo") == WorkflowState.BACKLOG

    def test_strict_raises(self) -> None:
        """Test that strict workflow state normalization rejects unknown values."""
        with pytest.raises(UnrecognizedValueError):
            normalize_workflow_state_strict("limbo")


# ==============================================================================
# MetadataNormalizer configuration
# ==============================================================================


class TestMetadataNormalizer:
    """Test MetadataNormalizer construction and options."""

    def test_extra_aliases(self) -> None:
        """Test that configured aliases extend the built-in tables."""
        normalizer = MetadataNormalizer(extra_aliases={STATUS: {"🚧 Doing it": "in_progress"}})
        assert normalizer.resolve(STATUS, "🚧 doing  it").value == "in_progress"

    def test_extra_alias_must_target_canonical(self) -> None:
        """Test that aliases to unknown values are rejected."""
        with pytest.raises(ValueError, match="unknown value"):
            MetadataNormalizer(extra_aliases={STATUS: {"asap": "urgent"}})

    def test_custom_default(self) -> None:
        """Test that a configured default replaces the built-in one."""
        normalizer = MetadataNormalizer(defaults={PRIORITY: "low"})
        assert normalizer.resolve(PRIORITY, "").value == "low"
        assert normalizer.resolve(PRIORITY, "whenever").value == "low"

    def test_invalid_default(self) -> None:
        """Test that a non-canonical default is rejected."""
        with pytest.raises(ValueError, match="not a canonical value"):
            MetadataNormalizer(defaults={STATUS: "someday"})

    def test_unknown_field(self) -> None:
        """Test that unknown fields raise ValueError."""
        normalizer = MetadataNormalizer()
        with pytest.raises(ValueError, match="Unknown metadata field"):
            normalizer.resolve("color", "red")

    def test_from_config(self) -> None:
        """Test building a normalizer from the metadata config section."""
        config = MetadataConfig(
            aliases={PRIORITY: {"asap": "highest"}},
            default_workflow_state="current",
        )
        normalizer = MetadataNormalizer.from_config(config)
        assert normalizer.resolve(PRIORITY, "ASAP").value == "highest"
        assert normalizer.default(WORKFLOW_STATE) == "current"

    def test_valid_options(self) -> None:
        """Test canonical option listing."""
        options = MetadataNormalizer().valid_options(TYPE)
        assert "feature" in options
        assert "enhancement" not in options


class TestLabelFor:
    """Test display labels."""

    def test_known_label(self) -> None:
        """Test labels for canonical names."""
        assert label_for(STATUS, "in_progress") == "In Progress"
        assert label_for(PRIORITY, "highest") == "Highest"

    def test_unknown_passes_through(self) -> None:
        """Test that unknown names are returned unchanged."""
        assert label_for(TYPE, "enhancement") == "enhancement"


# ==============================================================================
# Idempotence
# ==============================================================================


class TestIdempotence:
    """Test that normalizing an already normalized value changes nothing."""

    @pytest.mark.parametrize(
        "normalize,raw",
        [
            (normalize_status, "done"),
            (normalize_status, "🟡 To Do"),
            (normalize_status, "wip"),
            (normalize_status, "someday"),
            (normalize_status, None),
            (normalize_priority, "high"),
            (normalize_priority, "▶️ Medium"),
            (normalize_priority, "urgent"),
            (normalize_priority, "whenever"),
            (normalize_type, "bug"),
            (normalize_type, "🌟 Feature"),
            (normalize_type, "enhancement"),
            (normalize_type, None),
            (normalize_workflow_state, "current"),
            (normalize_workflow_state, "archived"),
            (normalize_workflow_state, "limbo"),
        ],
    )
    def test_safe_normalizers(self, normalize, raw) -> None:
        """Test normalize(normalize(x)) == normalize(x) on every field."""
        once = normalize(raw)
        assert normalize(once) == once

    @pytest.mark.parametrize(
        "normalize_strict,members",
        [
            (normalize_status_strict, list(TaskStatus)),
            (normalize_priority_strict, list(TaskPriority)),
            (normalize_type_strict, list(TaskType)),
            (normalize_workflow_state_strict, list(WorkflowState)),
        ],
    )
    def test_strict_accepts_enum_members(self, normalize_strict, members) -> None:
        """Test that strict normalizers accept their own canonical output."""
        for member in members:
            assert normalize_strict(member) == member

    def test_resolve_enum_member(self) -> None:
        """Test that resolving an enum member does not report it as unrecognized."""
        result = MetadataNormalizer().resolve(STATUS, TaskStatus.DONE)
        assert result.value == "done"
        assert not result.was_unrecognized
