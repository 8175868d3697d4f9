"""
BuildTrack - Core Domain

Read-only project and material records plus the statistics aggregator
that every report is built from:
1. Records (Project, Material) supplied by the caller
2. Statistics (compute_stats) computed once per report
"""

from .models import (
    BudgetStatus,
    Material,
    MaterialCategory,
    MaterialUnit,
    Project,
    ProjectStatus,
    create_sample_project,
    normalise_category,
    parse_report_payload,
)
from .statistics import CategoryBreakdown, Stats, compute_stats

__all__ = [
    # Records
    "BudgetStatus",
    "Material",
    "MaterialCategory",
    "MaterialUnit",
    "Project",
    "ProjectStatus",
    "create_sample_project",
    "normalise_category",
    "parse_report_payload",
    # Statistics
    "CategoryBreakdown",
    "Stats",
    "compute_stats",
]
