"""
Market participant implementation.

This module implements the actors of the P2P energy marketplace. A participant holds
an energy surplus it can sell, an energy demand it still wants to cover, and a currency
balance used to pay for purchases.
"""

from enum import Enum
from typing import Any, Dict, List


class ParticipantKind(Enum):
    """Declared kind of a market participant."""

    PRODUCER = "producer"
    CONSUMER = "consumer"
    STORAGE = "storage"


class Participant:
    """Participant (producer, consumer or storage node) of the energy marketplace."""

    def __init__(self,
                 id: str,
                 name: str,
                 energy_surplus: float = 0.0,
                 energy_demand: float = 0.0,
                 balance: float = 0.0,
                 kind: ParticipantKind = ParticipantKind.PRODUCER) -> None:
        """Initialize the participant.

        Args:
            id: Unique identifier for the participant
            name: Display name
            energy_surplus: Energy available to sell (kWh)
            energy_demand: Energy still wanted (kWh)
            balance: Currency balance
            kind: Declared participant kind
        """
        self.id = id
        self.name = name
        self.energy_surplus = float(energy_surplus)
        self.energy_demand = float(energy_demand)
        self.balance = float(balance)
        self.kind = ParticipantKind(kind)

        # Ids of executed trades, oldest first
        self.transaction_ids: List[str] = []

        # Check initialization
        self._check_init()

    def _check_init(self) -> None:
        """Validate participant parameters.

        Raises:
            ValueError: If id is not a non-empty string
            ValueError: If energy surplus is negative
            ValueError: If energy demand is negative
        """
        if not isinstance(self.id, str) or not self.id:
            raise ValueError(f"Participant id must be a non-empty string, got <id = {self.id!r}>.")

        if self.energy_surplus < 0:
            raise ValueError(f"Energy surplus must be non-negative, got <energy_surplus = {self.energy_surplus}>.")

        if self.energy_demand < 0:
            raise ValueError(f"Energy demand must be non-negative, got <energy_demand = {self.energy_demand}>.")

    @property
    def status(self) -> str:
        """Status derived from the current surplus and demand."""
        if self.energy_surplus > 0 and self.energy_demand > 0:
            return ParticipantKind.STORAGE.value
        if self.energy_surplus > 0:
            return ParticipantKind.PRODUCER.value
        return ParticipantKind.CONSUMER.value

    def can_sell(self, amount: float) -> bool:
        """Check whether the participant can deliver the given amount of energy.

        Args:
            amount: Energy to sell (kWh)

        Returns:
            True if the surplus covers the amount and the balance is not negative
        """
        return self.energy_surplus >= amount and self.balance >= 0

    def can_buy(self, amount: float, price: float) -> bool:
        """Check whether the participant can take and pay for the given amount of energy.

        Args:
            amount: Energy to buy (kWh)
            price: Price per unit

        Returns:
            True if the demand covers the amount and the balance covers the cost
        """
        return self.energy_demand >= amount and self.balance >= amount * price

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the participant for the network snapshot.

        Returns:
            Dictionary with the participant fields
        """
        return {"id": self.id,
                "name": self.name,
                "type": self.kind.value,
                "status": self.status,
                "surplus": self.energy_surplus,
                "demand": self.energy_demand,
                "balance": self.balance}

    def __repr__(self) -> str:
        return (f"Participant(id={self.id!r}, status={self.status!r}, surplus={self.energy_surplus}, "
                f"demand={self.energy_demand}, balance={self.balance})")
