"""
TransactionLedger: Append-only trade record and aggregates.
"""

import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from p2p_energy.market.ledger import TransactionLedger
from p2p_energy.market.transaction import Transaction


def _create_transaction(ledger, seller_id, buyer_id, energy, price, timestamp=1700000000.0) -> Transaction:
    """Create a transaction with a ledger-generated id."""
    return Transaction(id=ledger.next_id(timestamp),
                       seller_id=seller_id,
                       buyer_id=buyer_id,
                       energy_amount=energy,
                       price_per_unit=price,
                       timestamp=timestamp,
                       fee=energy * price * 0.02)


def test_transaction() -> None:
    """Test the immutable transaction record."""
    txn = Transaction("TXN1", "S", "B", 10.0, 0.2, 1700000000.0)

    assert txn.total_price == pytest.approx(2.0)
    assert txn.involves("S") and txn.involves("B") and not txn.involves("X")
    assert txn.to_dict() == {"id": "TXN1",
                             "sellerId": "S",
                             "buyerId": "B",
                             "energyAmount": 10.0,
                             "pricePerUnit": 0.2,
                             "totalPrice": pytest.approx(2.0),
                             "timestamp": 1700000000.0}
    assert len(txn.formatted_time) == len("2023-11-14 22:13:20")

    with pytest.raises(AttributeError):
        txn.energy_amount = 5.0

    with pytest.raises(ValueError):
        Transaction("TXN2", "S", "B", 0.0, 0.2, 0.0)

    with pytest.raises(ValueError):
        Transaction("TXN3", "S", "B", 1.0, -0.2, 0.0)
    print(f"✓ Transaction: {txn}")


def test_ledger() -> None:
    """Test recording, lookups and aggregates."""
    ledger = TransactionLedger()
    trades = [("S1", "B1", 45.5, 0.18), ("S2", "B2", 78.2, 0.16), ("S1", "B2", 32.7, 0.22)]

    for i, (seller, buyer, energy, price) in enumerate(trades):
        ledger.record(_create_transaction(ledger, seller, buyer, energy, price))
        assert len(ledger) == i + 1

    history = ledger.all()
    assert [t.seller_id for t in history] == ["S1", "S2", "S1"]
    assert len({t.id for t in history}) == 3
    assert ledger.get(history[1].id) is history[1]
    assert ledger.get("missing") is None

    assert ledger.total_volume() == pytest.approx(sum(t[2] for t in trades))
    assert ledger.total_revenue() == pytest.approx(sum(t[2] * t[3] for t in trades))
    assert ledger.total_fees() == pytest.approx(ledger.total_revenue() * 0.02)
    print(f"  - Total volume: {ledger.total_volume():.2f} kWh")
    print(f"  - Total revenue: {ledger.total_revenue():.2f}")

    # Every trade reaches the analytics exactly once
    assert ledger.analytics.sample_count() == 3
    assert ledger.analytics.total_volume() == pytest.approx(ledger.total_volume())

    assert [t.buyer_id for t in ledger.for_participant("B2")] == ["B2", "B2"]
    assert [t.energy_amount for t in ledger.for_participant("S1")] == [45.5, 32.7]
    assert ledger.for_participant("nobody") == []

    assert ledger.recent(2) == history[1:]
    assert ledger.recent(10) == history
    assert ledger.recent(0) == []
    print(f"✓ Ledger holds {len(ledger)} transactions")


def test_duplicate_id() -> None:
    """Test last-write-wins indexing on duplicate ids."""
    ledger = TransactionLedger()
    first = Transaction("TXN1", "S", "B", 1.0, 0.1, 0.0)
    second = Transaction("TXN1", "S", "B", 2.0, 0.1, 0.0)

    ledger.record(first)
    ledger.record(second)

    assert ledger.get("TXN1") is second
    assert len(ledger) == 2
    print("✓ Duplicate id overwrites the index entry")


def run_tests() -> bool:
    """Run all comprehensive tests.

    Returns:
        bool: True if all tests passed, False otherwise.
    """
    print("🚀 STARTING TransactionLedger TESTS")

    try:
        test_transaction()
        test_ledger()
        test_duplicate_id()
        print("🎉 TransactionLedger TESTS COMPLETED SUCCESSFULLY!")
        return True

    except Exception as e:
        print(f"❌ ERROR during testing: {str(e)}")
        return False


if __name__ == "__main__":
    success = run_tests()
    exit(0 if success else 1)
