"""
Schema-driven normalization of task metadata.

Maps every accepted spelling of a value (canonical name, label, legacy emoji,
"emoji label" combinations and aliases) to its canonical name through lookup
tables built once from the schema. Two flavours are exposed for each field:

* **safe** (``normalize_status``, ``resolve_status`` ...) never raises. Unknown
  input yields the field default, and ``resolve_*`` reports it through
  ``NormalizedValue.was_unrecognized``. Display code always uses these.
* **strict** (``normalize_status_strict`` ...) raises UnrecognizedValueError
  and is meant for validation contexts.

Task types are special: UI-only tags outside the canonical set (e.g.
"enhancement") pass through unchanged in the safe flavour.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import TYPE_CHECKING

from tasktree.core.errors import UnrecognizedValueError
from tasktree.core.tasks.models import TaskPriority, TaskStatus, TaskType, WorkflowState

from .schema import DEFAULTS, FIELDS, PRIORITY, SCHEMA, STATUS, TYPE, WORKFLOW_STATE, MetadataValue

if TYPE_CHECKING:
    from tasktree.core.config.models import MetadataConfig

logger = logging.getLogger(__name__)

# Emoji presentation selectors are dropped so "▶️" and "▶" compare equal
_VARIATION_SELECTORS = re.compile("[\ufe0e\ufe0f]")
_WHITESPACE = re.compile(r"\s+")

# Fields whose unknown values are kept as-is by the safe normalizer
PASSTHROUGH_FIELDS: frozenset[str] = frozenset({TYPE})


def _as_text(raw: object) -> str | None:
    """Raw input as plain text; enum members contribute their value."""
    if raw is None:
        return None
    if isinstance(raw, Enum):
        return str(raw.value)
    return str(raw)


def normalize_key(value: str) -> str:
    """Case-fold and tidy a raw value for table lookup."""
    value = _VARIATION_SELECTORS.sub("", value)
    return _WHITESPACE.sub(" ", value).strip().lower()


def build_normalizer_map(values: tuple[MetadataValue, ...]) -> dict[str, str]:
    """
    Build the lookup table for one field.

    Maps all variations (name, label, emoji, "emoji label", aliases) to the
    canonical name, keyed by normalize_key().
    """
    table: dict[str, str] = {}
    for value in values:
        table[normalize_key(value.name)] = value.name
        table[normalize_key(value.label)] = value.name
        if value.emoji:
            table[normalize_key(value.emoji)] = value.name
            table[normalize_key(f"{value.emoji} {value.label}")] = value.name
        for alias in value.aliases:
            table[normalize_key(alias)] = value.name
    return table


@dataclass(frozen=True)
class NormalizedValue:
    """Result of a safe normalization."""

    value: str
    was_unrecognized: bool = False
    raw: str | None = None


class MetadataNormalizer:
    """
    Normalizes raw metadata strings using per-field alias tables.

    Example:
        >>> normalizer = MetadataNormalizer()
        >>> normalizer.resolve("status", "🟡 To Do")
        NormalizedValue(value='todo', was_unrecognized=False, raw='🟡 To Do')
        >>> normalizer.resolve("status", "someday").was_unrecognized
        True
    """

    def __init__(
        self,
        schema: Mapping[str, tuple[MetadataValue, ...]] | None = None,
        extra_aliases: Mapping[str, Mapping[str, str]] | None = None,
        defaults: Mapping[str, str] | None = None,
    ) -> None:
        """
        Build lookup tables.

        Args:
            schema: Field name -> metadata values (defaults to the built-in schema)
            extra_aliases: Field name -> {alias: canonical name}, layered on top
            defaults: Field name -> default canonical name for missing/unknown input

        Raises:
            ValueError: If an extra alias or default targets a non-canonical name
        """
        self._schema = dict(schema or SCHEMA)
        self._tables: dict[str, dict[str, str]] = {
            field: build_normalizer_map(values) for field, values in self._schema.items()
        }
        self._valid: dict[str, list[str]] = {
            field: [v.name for v in values] for field, values in self._schema.items()
        }

        for field, aliases in (extra_aliases or {}).items():
            table = self._table(field)
            for alias, canonical in aliases.items():
                if canonical not in self._valid[field]:
                    raise ValueError(
                        f"Alias {alias!r} for {field} targets unknown value {canonical!r}"
                    )
                table[normalize_key(alias)] = canonical

        self._defaults = dict(DEFAULTS)
        for field, default in (defaults or {}).items():
            if default not in self._valid.get(field, []):
                raise ValueError(f"Default {field} {default!r} is not a canonical value")
            self._defaults[field] = default

    @classmethod
    def from_config(cls, config: MetadataConfig) -> MetadataNormalizer:
        """Build a normalizer from the ``metadata`` config section."""
        return cls(extra_aliases=config.aliases, defaults=config.defaults())

    def _table(self, field: str) -> dict[str, str]:
        try:
            return self._tables[field]
        except KeyError:
            raise ValueError(f"Unknown metadata field {field!r}") from None

    def valid_options(self, field: str) -> list[str]:
        """Canonical names accepted for a field."""
        self._table(field)
        return list(self._valid[field])

    def default(self, field: str) -> str:
        """Default canonical name for a field."""
        self._table(field)
        return self._defaults[field]

    def lookup(self, field: str, raw: str) -> str | None:
        """
        Find the canonical name for a non-empty raw value, or None.

        Tries the whole value first, then, for legacy "<marker> <label>"
        strings, the leading marker and the remainder on their own.
        """
        table = self._table(field)
        key = normalize_key(_as_text(raw) or "")
        if key in table:
            return table[key]

        head, _, tail = key.partition(" ")
        if tail and not any(ch.isalnum() for ch in head):
            for part in (head, tail):
                if part in table:
                    return table[part]
        return None

    def resolve(self, field: str, raw: str | None) -> NormalizedValue:
        """Safe normalization: never raises for known fields."""
        raw = _as_text(raw)
        if raw is None or not raw.strip():
            return NormalizedValue(value=self.default(field), raw=raw)

        canonical = self.lookup(field, raw)
        if canonical is not None:
            return NormalizedValue(value=canonical, raw=raw)

        if field in PASSTHROUGH_FIELDS:
            return NormalizedValue(value=raw.strip(), was_unrecognized=True, raw=raw)

        logger.debug(f"Unrecognized {field} {raw!r}, using {self.default(field)!r}")
        return NormalizedValue(value=self.default(field), was_unrecognized=True, raw=raw)

    def normalize_strict(self, field: str, raw: str | None) -> str:
        """
        Strict normalization for validation contexts.

        Missing values still resolve to the field default.

        Raises:
            UnrecognizedValueError: If the value matches nothing in the table
        """
        raw = _as_text(raw)
        if raw is None or not raw.strip():
            return self.default(field)

        canonical = self.lookup(field, raw)
        if canonical is None:
            raise UnrecognizedValueError(field, raw, self.valid_options(field))
        return canonical


@lru_cache(maxsize=1)
def get_default_normalizer() -> MetadataNormalizer:
    """Shared normalizer over the built-in schema. Immutable after build."""
    return MetadataNormalizer()


# ============================================================================
# Field helpers over the built-in schema
# ============================================================================


def resolve_status(raw: str | None) -> NormalizedValue:
    return get_default_normalizer().resolve(STATUS, raw)


def normalize_status(raw: str | None) -> TaskStatus:
    """Safe status normalization (unknown -> todo)."""
    return TaskStatus(resolve_status(raw).value)


def normalize_status_strict(raw: str | None) -> TaskStatus:
    return TaskStatus(get_default_normalizer().normalize_strict(STATUS, raw))


def resolve_priority(raw: str | None) -> NormalizedValue:
    return get_default_normalizer().resolve(PRIORITY, raw)


def normalize_priority(raw: str | None) -> TaskPriority:
    """Safe priority normalization (missing/unknown -> medium)."""
    return TaskPriority(resolve_priority(raw).value)


def normalize_priority_strict(raw: str | None) -> TaskPriority:
    return TaskPriority(get_default_normalizer().normalize_strict(PRIORITY, raw))


def resolve_type(raw: str | None) -> NormalizedValue:
    return get_default_normalizer().resolve(TYPE, raw)


def normalize_type(raw: str | None) -> TaskType | str:
    """
    Safe type normalization.

    Returns a TaskType for known spellings and the stripped raw string for
    UI-only tags such as "enhancement".
    """
    result = resolve_type(raw)
    if result.was_unrecognized:
        return result.value
    return TaskType(result.value)


def normalize_type_strict(raw: str | None) -> TaskType:
    return TaskType(get_default_normalizer().normalize_strict(TYPE, raw))


def resolve_workflow_state(raw: str | None) -> NormalizedValue:
    return get_default_normalizer().resolve(WORKFLOW_STATE, raw)


def normalize_workflow_state(raw: str | None) -> WorkflowState:
    """Safe workflow state normalization (unknown -> backlog)."""
    return WorkflowState(resolve_workflow_state(raw).value)


def normalize_workflow_state_strict(raw: str | None) -> WorkflowState:
    return WorkflowState(get_default_normalizer().normalize_strict(WORKFLOW_STATE, raw))


def is_completed_status(raw: str | None) -> bool:
    """Whether a status, in any spelling, normalizes to done."""
    return normalize_status(raw) == TaskStatus.DONE


def priority_order(raw: str | None) -> int:
    """
    Numeric priority for sorting (highest=4 ... low=1).

    Missing or unrecognized priorities sort below everything (0).
    """
    if not raw:
        return 0
    result = resolve_priority(raw)
    if result.was_unrecognized:
        return 0
    return TaskPriority(result.value).order


__all__ = [
    "FIELDS",
    "MetadataNormalizer",
    "NormalizedValue",
    "PASSTHROUGH_FIELDS",
    "build_normalizer_map",
    "get_default_normalizer",
    "is_completed_status",
    "normalize_key",
    "normalize_priority",
    "normalize_priority_strict",
    "normalize_status",
    "normalize_status_strict",
    "normalize_type",
    "normalize_type_strict",
    "normalize_workflow_state",
    "normalize_workflow_state_strict",
    "priority_order",
    "resolve_priority",
    "resolve_status",
    "resolve_type",
    "resolve_workflow_state",
]
