"""
Data models for construction projects and their materials.

Records are read-only snapshots supplied by the caller (HTTP layer, CLI,
tests). The report engine never mutates them.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Final, Optional

from utils.formatting import parse_date, to_number


logger = logging.getLogger(__name__)


# =============================================================================
# Enums
# =============================================================================


class ProjectStatus(Enum):
    """Lifecycle status of a construction project."""

    PLANNING = "planning"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    ON_HOLD = "on-hold"


class MaterialCategory(Enum):
    """Classification tag used to group materials."""

    CONSTRUCTION = "construction"
    ELECTRICAL = "electrical"
    PLUMBING = "plumbing"
    FINISHING = "finishing"
    OTHER = "other"


class MaterialUnit(Enum):
    """Measurement units accepted for material quantities."""

    SQM = "sqm"
    KG = "kg"
    UNIT = "unit"
    M3 = "m3"
    TON = "ton"
    LITER = "liter"
    METER = "meter"
    PIECE = "piece"


# =============================================================================
# Constants
# =============================================================================

KNOWN_CATEGORIES: Final[frozenset[str]] = frozenset(c.value for c in MaterialCategory)

# Fallback bucket for unclassified materials
OTHER_CATEGORY: Final[str] = MaterialCategory.OTHER.value

DEFAULT_CATEGORY: Final[str] = MaterialCategory.CONSTRUCTION.value


def normalise_category(category: Optional[str]) -> str:
    """Map a raw category tag onto a known category, defaulting to 'other'."""
    if not category:
        return OTHER_CATEGORY
    value = str(getattr(category, "value", category)).strip().lower()
    return value if value in KNOWN_CATEGORIES else OTHER_CATEGORY


def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    """Return the first present key, accepting camelCase and snake_case."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


# =============================================================================
# Material
# =============================================================================


@dataclass(frozen=True)
class Material:
    """
    A material line item scoped to one project.

    `total_price` is normally quantity x price_per_unit as computed by the
    persistence layer. Numeric fields may carry raw, unvalidated values;
    use `cost` for a safe numeric total.
    """

    name: str
    unit: str
    quantity: float
    price_per_unit: float
    category: str = DEFAULT_CATEGORY
    total_price: Optional[float] = None
    supplier: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    id: Optional[str] = None

    @property
    def cost(self) -> float:
        """Numeric total price; unreadable values contribute zero."""
        if self.total_price is None:
            return to_number(self.quantity) * to_number(self.price_per_unit)
        return to_number(self.total_price)

    @property
    def has_valid_cost(self) -> bool:
        """True when the recorded total price is a usable number."""
        if self.total_price is None:
            return True
        if isinstance(self.total_price, bool):
            return False
        try:
            value = float(self.total_price)
        except (TypeError, ValueError):
            return False
        return not (math.isnan(value) or math.isinf(value))

    @property
    def group(self) -> str:
        """Category bucket used for grouping."""
        return normalise_category(self.category)

    @classmethod
    def from_dict(cls, data: dict) -> "Material":
        """Build a Material from a JSON-style dict (camelCase or snake_case)."""
        quantity = _pick(data, "quantity", default=0)
        price = _pick(data, "price_per_unit", "pricePerUnit", default=0)
        total = _pick(data, "total_price", "totalPrice")
        if total is None:
            total = to_number(quantity) * to_number(price)

        return cls(
            id=_pick(data, "id", "_id"),
            name=str(_pick(data, "name", default="")),
            unit=str(_pick(data, "unit", default=MaterialUnit.UNIT.value)).lower(),
            quantity=quantity,
            price_per_unit=price,
            total_price=total,
            category=str(_pick(data, "category", default=DEFAULT_CATEGORY)),
            supplier=_pick(data, "supplier"),
            description=_pick(data, "description"),
            created_at=parse_date(_pick(data, "created_at", "createdAt")),
        )

    def to_dict(self) -> dict:
        """Convert to a JSON-safe dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "unit": self.unit,
            "quantity": self.quantity,
            "price_per_unit": self.price_per_unit,
            "total_price": self.cost,
            "supplier": self.supplier,
            "description": self.description,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


# =============================================================================
# Project
# =============================================================================


@dataclass(frozen=True)
class BudgetStatus:
    """Comparison of actual cost against the project budget."""

    difference: float
    percentage: float

    @property
    def status(self) -> str:
        if self.difference > 0:
            return "over-budget"
        if self.difference < 0:
            return "under-budget"
        return "on-budget"

    @property
    def is_over_budget(self) -> bool:
        return self.difference > 0


@dataclass(frozen=True)
class Project:
    """A construction project, fully resolved by the caller."""

    id: str
    name: str
    location: str
    status: ProjectStatus = ProjectStatus.PLANNING
    budget: Optional[float] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    description: str = ""
    notes: str = ""
    total_cost: float = 0.0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_budget(self) -> bool:
        """A budget of zero is treated as unset."""
        return to_number(self.budget) > 0

    @property
    def has_dates(self) -> bool:
        return self.start_date is not None or self.end_date is not None

    @property
    def duration_days(self) -> Optional[int]:
        """Whole days between start and end, rounded up."""
        if self.start_date is None or self.end_date is None:
            return None
        start = parse_date(self.start_date)
        end = parse_date(self.end_date)
        seconds = abs((end - start).total_seconds())
        return math.ceil(seconds / 86400)

    def budget_status(self, total: Optional[float] = None) -> Optional[BudgetStatus]:
        """
        Compare a total cost with the budget.

        Args:
            total: Cost to compare; defaults to the recorded total_cost.

        Returns:
            BudgetStatus, or None when no budget is set.
        """
        if not self.has_budget:
            return None
        budget = to_number(self.budget)
        actual = to_number(self.total_cost if total is None else total)
        return BudgetStatus(
            difference=actual - budget,
            percentage=actual / budget * 100,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "Project":
        """Build a Project from a JSON-style dict (camelCase or snake_case)."""
        raw_status = _pick(data, "status", default=ProjectStatus.PLANNING.value)
        status = raw_status if isinstance(raw_status, ProjectStatus) else ProjectStatus(raw_status)

        budget = _pick(data, "budget")
        if budget is not None and to_number(budget, default=-1) < 0:
            logger.warning("Ignoring unreadable budget %r for project %s", budget, data.get("name"))
            budget = None

        start = parse_date(_pick(data, "start_date", "startDate"))
        end = parse_date(_pick(data, "end_date", "endDate"))

        return cls(
            id=str(_pick(data, "id", "_id", default="")),
            name=str(_pick(data, "name", default="")),
            location=str(_pick(data, "location", default="")),
            status=status,
            budget=budget,
            start_date=start.date() if start else None,
            end_date=end.date() if end else None,
            description=str(_pick(data, "description", default="")),
            notes=str(_pick(data, "notes", default="")),
            total_cost=_pick(data, "total_cost", "totalCost", default=0.0),
            created_at=parse_date(_pick(data, "created_at", "createdAt")),
            updated_at=parse_date(_pick(data, "updated_at", "updatedAt")),
        )

    def to_dict(self) -> dict:
        """Convert to a JSON-safe dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "status": getattr(self.status, "value", self.status),
            "budget": self.budget,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "description": self.description,
            "notes": self.notes,
            "total_cost": to_number(self.total_cost),
            "duration_days": self.duration_days,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


def parse_report_payload(data: dict) -> tuple[Optional[Project], list[Material]]:
    """
    Parse a report payload.

    Accepts either {"project": {...}, "materials": [...]} or a single project
    object with an embedded "materials" list (the populated-document shape).
    A null project yields (None, []) so the caller reports it as not found.
    """
    if "project" in data:
        project_data = data["project"]
        if project_data is None:
            return None, []
        if not isinstance(project_data, dict):
            raise ValueError("project must be a JSON object")
        materials_data = data.get("materials") or project_data.get("materials") or []
    else:
        project_data = data
        materials_data = data.get("materials") or []

    project = Project.from_dict(project_data)
    materials = [Material.from_dict(m) for m in materials_data if isinstance(m, dict)]
    return project, materials


# =============================================================================
# Sample Data
# =============================================================================


def create_sample_project() -> tuple[Project, list[Material]]:
    """
    Create a sample project with materials for testing and demos.

    Returns:
        (Project, materials) tuple
    """
    materials = [
        Material(name="Portland cement CEM II", category="construction", unit="ton",
                 quantity=12, price_per_unit=4200, total_price=50400, supplier="Ciments de Mauritanie"),
        Material(name="Reinforcement steel 12mm", category="construction", unit="ton",
                 quantity=4.5, price_per_unit=26500, total_price=119250, supplier="Sotumef"),
        Material(name="Sand (washed)", category="construction", unit="m3",
                 quantity=40, price_per_unit=650, total_price=26000),
        Material(name="Copper cable 2.5mm2", category="electrical", unit="meter",
                 quantity=850, price_per_unit=38, total_price=32300, supplier="ElecNord"),
        Material(name="Distribution board 24 ways", category="electrical", unit="piece",
                 quantity=2, price_per_unit=9800, total_price=19600, supplier="ElecNord"),
        Material(name="PVC pipe 110mm", category="plumbing", unit="meter",
                 quantity=120, price_per_unit=210, total_price=25200),
        Material(name="Ceramic floor tiles 60x60", category="finishing", unit="sqm",
                 quantity=310, price_per_unit=480, total_price=148800, supplier="Carrelages du Sahel"),
        Material(name="Interior paint (white)", category="finishing", unit="liter",
                 quantity=220, price_per_unit=145, total_price=31900),
    ]
    total = sum(m.cost for m in materials)

    project = Project(
        id="PRJ-2024-0117",
        name="Residence Tevragh Zeina - Block B",
        location="Tevragh Zeina, Nouakchott",
        status=ProjectStatus.IN_PROGRESS,
        budget=500000,
        start_date=date(2024, 3, 1),
        end_date=date(2024, 11, 30),
        description="Four-storey residential block with ground-floor retail units.",
        notes="Steel delivery rescheduled to week 14. Tile order confirmed with supplier.",
        total_cost=total,
        created_at=datetime(2024, 2, 12, 9, 30),
        updated_at=datetime(2024, 6, 3, 16, 45),
    )
    return project, materials
