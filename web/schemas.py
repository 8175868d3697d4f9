"""
API request models for the report endpoints.

Validated by pydantic, then converted to the core dataclasses the report
engine consumes.
"""

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from core.models import Material, Project


class MaterialInput(BaseModel):
    """A material line item."""
    id: Optional[str] = None
    name: str
    category: str = "construction"
    unit: str = "unit"
    quantity: float = Field(default=0, ge=0)
    price_per_unit: float = Field(default=0, ge=0)
    total_price: Optional[float] = None  # defaults to quantity x price_per_unit
    supplier: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_material(self) -> Material:
        return Material.from_dict(self.model_dump(exclude_none=True))


class ProjectInput(BaseModel):
    """A construction project record."""
    id: str = ""
    name: str
    location: str = ""
    status: Literal["planning", "in-progress", "completed", "on-hold"] = "planning"
    budget: Optional[float] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    description: str = ""
    notes: str = ""
    total_cost: float = 0.0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_project(self) -> Project:
        return Project.from_dict(self.model_dump(exclude_none=True))


class ReportRequest(BaseModel):
    """Request body for report generation: the project and its materials."""
    project: Optional[ProjectInput] = None
    materials: List[MaterialInput] = []

    def to_records(self) -> tuple[Optional[Project], list[Material]]:
        project = self.project.to_project() if self.project is not None else None
        return project, [m.to_material() for m in self.materials]
