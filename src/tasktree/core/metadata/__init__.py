"""
Metadata normalization.

Maps raw and legacy metadata strings (status, priority, type, workflow state)
to canonical values using data-driven alias tables.
"""

from .normalizer import (
    MetadataNormalizer,
    NormalizedValue,
    get_default_normalizer,
    is_completed_status,
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
    resolve_priority,
    resolve_status,
    resolve_type,
    resolve_workflow_state,
)
from .schema import FIELDS, PRIORITY, SCHEMA, STATUS, TYPE, WORKFLOW_STATE, MetadataValue, label_for

__all__ = [
    # Schema
    "FIELDS",
    "MetadataValue",
    "PRIORITY",
    "SCHEMA",
    "STATUS",
    "TYPE",
    "WORKFLOW_STATE",
    "label_for",
    # Normalizers
    "MetadataNormalizer",
    "NormalizedValue",
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
