"""
Data models for TripLedger
"""
from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List

# Category keys as stored by the trip planner's saved data
CATEGORIES = ("Casa", "Transporte", "Comida", "Entradas", "Actividades")


@dataclass
class TripItem:
    """Single expense item inside a category"""
    id: str
    name: str
    cost: Any  # raw value from saved data; coerced when computing
    paid: bool = False
    paid_by: str = ""


@dataclass
class Reimbursement:
    """Money that already changed hands: debtor paid creditor"""
    debtor: str
    creditor: str
    amount: float
    date: str  # ISO-8601 timestamp


@dataclass
class Trip:
    """Complete trip with families, expense items and payment history"""
    id: int
    name: str
    start_date: str  # YYYY-MM-DD
    end_date: str
    created: str
    families: List[str]
    reimbursements: List[Reimbursement] = field(default_factory=list)
    items: Dict[str, List[TripItem]] = field(default_factory=dict)
    # carried through untouched
    itinerary: Dict[str, list] = field(default_factory=dict)
    social_links: List[dict] = field(default_factory=list)
    locations: List[dict] = field(default_factory=list)


@dataclass
class FamilyBalance:
    """Net position of one family; balance > 0 is owed money"""
    family: str
    contribution: float
    balance: float


@dataclass
class Settlement:
    """Suggested payment from debtor to creditor"""
    debtor: str
    creditor: str
    amount: float


@dataclass
class FinancialSummary:
    """Everything the engine derives from a trip snapshot"""
    total: float
    paid: float
    fair_share: float
    balances: List[FamilyBalance]
    settlements: List[Settlement]
    months_until_trip: int
    monthly_saving_needed: float

    @property
    def progress(self) -> int:
        """Percentage of the total already paid"""
        if self.total > 0:
            # half-up, not banker's rounding
            return int(math.floor(self.paid / self.total * 100 + 0.5))
        return 0

    @property
    def is_settled(self) -> bool:
        return not self.settlements
