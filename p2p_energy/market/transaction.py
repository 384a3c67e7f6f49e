"""
Transaction and trade data classes for the P2P Energy Marketplace.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Transaction:
    """Represents an executed trade between two participants."""
    id: str  # Unique identifier within a running platform
    seller_id: str
    buyer_id: str
    energy_amount: float  # Traded energy (kWh)
    price_per_unit: float
    timestamp: float  # Epoch seconds
    fee: float = 0.0  # Platform fee deducted from the seller's proceeds
    total_price: float = field(init=False)

    def __post_init__(self) -> None:
        """Derive the total price and validate the trade values."""
        object.__setattr__(self, "total_price", self.energy_amount * self.price_per_unit)

        if self.energy_amount <= 0:
            raise ValueError(f"Energy amount must be positive, got <energy_amount = {self.energy_amount}>.")

        if self.price_per_unit <= 0:
            raise ValueError(f"Price per unit must be positive, got <price_per_unit = {self.price_per_unit}>.")

    @property
    def formatted_time(self) -> str:
        """Local trade time as 'YYYY-MM-DD HH:MM:SS'."""
        return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(self.timestamp))

    def involves(self, participant_id: str) -> bool:
        return participant_id in (self.seller_id, self.buyer_id)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the transaction for the transaction feed."""
        return {"id": self.id,
                "sellerId": self.seller_id,
                "buyerId": self.buyer_id,
                "energyAmount": self.energy_amount,
                "pricePerUnit": self.price_per_unit,
                "totalPrice": self.total_price,
                "timestamp": self.timestamp}


@dataclass
class TradeSuggestion:
    """Represents a candidate trade proposed by the suggestion engine."""
    seller_id: str
    buyer_id: str
    suggested_energy: float
    suggested_price: float
    match_score: float  # Heuristic ranking in [0, 1]
    path: List[str] = field(default_factory=list)  # Shortest network path, empty if none
    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the suggestion for the rendering layer."""
        return {"sellerId": self.seller_id,
                "buyerId": self.buyer_id,
                "suggestedEnergy": self.suggested_energy,
                "suggestedPrice": self.suggested_price,
                "matchScore": self.match_score,
                "path": list(self.path),
                "reason": self.reason}


class TradeStatus(Enum):
    """Outcome of a trade request."""

    EXECUTED = "executed"
    UNKNOWN_PARTICIPANT = "unknown_participant"
    SELF_TRADE = "self_trade"
    INSUFFICIENT_SURPLUS = "insufficient_surplus"
    INSUFFICIENT_DEMAND = "insufficient_demand"
    INSUFFICIENT_BALANCE = "insufficient_balance"


@dataclass
class TradeResult:
    """Result of a trade request; truthy only when the trade was executed."""
    status: TradeStatus
    transaction: Optional[Transaction] = None
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status is TradeStatus.EXECUTED

    def __bool__(self) -> bool:
        return self.success
