"""
Configuration data models for tasktree.

These models define the structure of .tasktree.json and
~/.config/tasktree/config.json files, with validation and type safety via
Pydantic.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tasktree.core.metadata.schema import FIELDS, PRIORITY, STATUS, TYPE, WORKFLOW_STATE


class MetadataConfig(BaseModel):
    """
    Metadata normalization settings.

    Extra aliases let a project accept its own legacy spellings without
    code changes, e.g. {"status": {"🚧 Doing": "in_progress"}}.
    """
    aliases: dict[str, dict[str, str]] = Field(
        default_factory=dict,
        description="Per-field mapping of extra alias -> canonical name"
    )
    default_status: Optional[str] = Field(
        default=None,
        description="Status used for missing or unrecognized values"
    )
    default_priority: Optional[str] = Field(
        default=None,
        description="Priority used for missing or unrecognized values"
    )
    default_type: Optional[str] = Field(
        default=None,
        description="Type used for missing values"
    )
    default_workflow_state: Optional[str] = Field(
        default=None,
        description="Workflow state used for missing or unrecognized values"
    )

    @field_validator('aliases')
    @classmethod
    def validate_alias_fields(cls, v: dict[str, dict[str, str]]) -> dict[str, dict[str, str]]:
        """Reject alias tables for fields the normalizer does not know."""
        unknown = sorted(set(v) - set(FIELDS))
        if unknown:
            raise ValueError(f"Unknown metadata fields in aliases: {', '.join(unknown)}")
        return v

    def defaults(self) -> dict[str, str]:
        """Configured per-field defaults, omitting unset ones."""
        configured = {
            STATUS: self.default_status,
            PRIORITY: self.default_priority,
            TYPE: self.default_type,
            WORKFLOW_STATE: self.default_workflow_state,
        }
        return {field: value for field, value in configured.items() if value}


class SequenceConfig(BaseModel):
    """
    Subtask sequencing settings.
    """
    sentinel_step: str = Field(
        default="99",
        min_length=1,
        description="Step given to subtasks without a sequence code (sorts last)"
    )


class TaskTreeConfig(BaseModel):
    """
    Top-level tasktree configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = TaskTreeConfig(
        ...     metadata=MetadataConfig(aliases={"priority": {"asap": "highest"}}),
        ...     sequence=SequenceConfig(sentinel_step="zz"),
        ... )
        >>> config.sequence.sentinel_step
        'zz'
    """
    metadata: MetadataConfig = Field(
        default_factory=MetadataConfig,
        description="Metadata normalization"
    )
    sequence: SequenceConfig = Field(
        default_factory=SequenceConfig,
        description="Subtask sequencing"
    )

    model_config = ConfigDict(
        extra="allow",  # Allow extra fields for forward compatibility
        validate_assignment=True,  # Validate on field assignment
    )
