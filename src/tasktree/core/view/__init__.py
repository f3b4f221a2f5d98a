"""
View projection.

Turns task snapshots into ordered, renderer-agnostic node trees.
"""

from .models import NodeKind, SectionView, TaskView, ViewNode
from .projector import ViewProjector, project_section, project_view

__all__ = [
    "NodeKind",
    "SectionView",
    "TaskView",
    "ViewNode",
    "ViewProjector",
    "project_section",
    "project_view",
]
