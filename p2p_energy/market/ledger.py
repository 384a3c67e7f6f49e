"""
Transaction ledger for the P2P Energy Marketplace.

This module keeps the append-only record of executed trades, indexed by id and by
insertion order, and feeds every recorded trade to the market analytics.
"""

import itertools
from typing import Dict, List, Optional

from ..analytics.market_analytics import MarketAnalytics
from .transaction import Transaction


class TransactionLedger:
    """Append-only record of executed trades."""

    def __init__(self, analytics: Optional[MarketAnalytics] = None) -> None:
        """Initialize the ledger.

        Args:
            analytics: Analytics fed with every recorded trade (a new instance if None)
        """
        self._analytics = analytics if analytics is not None else MarketAnalytics()
        self._transactions: Dict[str, Transaction] = {}
        self._history: List[Transaction] = []
        self._counter = itertools.count(1)

    @property
    def analytics(self) -> MarketAnalytics:
        return self._analytics

    def next_id(self, timestamp: float) -> str:
        """Generate a transaction id unique within this ledger.

        Args:
            timestamp: Trade time (epoch seconds)

        Returns:
            Identifier of the form 'TXN<seconds>_<sequence>'
        """
        return f"TXN{int(timestamp)}_{next(self._counter):04d}"

    def record(self, transaction: Transaction) -> None:
        """Append a transaction and forward it to the analytics.

        A transaction with an id already present replaces it in the id index.

        Args:
            transaction: Executed trade
        """
        self._transactions[transaction.id] = transaction
        self._history.append(transaction)
        self._analytics.record_sample(transaction.energy_amount,
                                      transaction.price_per_unit,
                                      transaction.timestamp)

    def all(self) -> List[Transaction]:
        """Full history, oldest first."""
        return list(self._history)

    def get(self, transaction_id: str) -> Optional[Transaction]:
        return self._transactions.get(transaction_id)

    def for_participant(self, participant_id: str) -> List[Transaction]:
        """Get the trades where a participant was seller or buyer.

        Args:
            participant_id: Participant identifier

        Returns:
            Matching transactions in insertion order
        """
        return [t for t in self._history if t.involves(participant_id)]

    def total_volume(self) -> float:
        return sum(t.energy_amount for t in self._history)

    def total_revenue(self) -> float:
        return sum(t.total_price for t in self._history)

    def total_fees(self) -> float:
        """Exact sum of the fees deducted per trade."""
        return sum(t.fee for t in self._history)

    def recent(self, n: int = 10) -> List[Transaction]:
        """Get the most recent trades.

        Args:
            n: Number of trades

        Returns:
            Last n transactions in insertion order (all of them if fewer)
        """
        if n <= 0:
            return []
        return self._history[-n:]

    def __len__(self) -> int:
        return len(self._history)
