"""
Trading platform for the P2P Energy Marketplace.

This module orchestrates the participant registry, the trading network, the
transaction ledger and the suggestion engine. It enforces the trade invariants
(energy and balance conservation, fee deduction), derives the market statistics and
exposes JSON-ready snapshots for the rendering layer. A background thread refreshes
the network layout periodically; all shared state is guarded by a single lock.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..agent.participant import Participant, ParticipantKind
from ..analytics.market_analytics import MarketAnalytics
from ..grid.base import DEFAULT_CANVAS_HEIGHT, DEFAULT_CANVAS_WIDTH, Position
from ..grid.network import NetworkGraph
from .ledger import TransactionLedger
from .suggestion import SuggestionConfig, TradeSuggestionEngine
from .transaction import TradeResult, TradeStatus, TradeSuggestion, Transaction

logger = logging.getLogger(__name__)


@dataclass
class PlatformConfig:
    """Trading platform configuration parameters."""

    fee_rate: float = 0.02  # Share of each trade's total price kept by the platform
    refresh_interval: float = 2.0  # Seconds between background layout refreshes
    canvas_width: int = DEFAULT_CANVAS_WIDTH  # Layout canvas width
    canvas_height: int = DEFAULT_CANVAS_HEIGHT  # Layout canvas height
    history_points: int = 15  # Points returned by the price/volume history feeds
    recent_transactions: int = 10  # Default number of recent transactions
    seed: Optional[int] = None  # Random seed of the suggestion engine
    suggestion: SuggestionConfig = field(default_factory=SuggestionConfig)
    auto_start: bool = False  # Start the background refresh on construction

    def __post_init__(self) -> None:
        """Validate the platform configuration parameters."""
        self._check_init()

    def _check_init(self) -> None:
        """Validate the platform configuration parameters."""
        if not 0 <= self.fee_rate < 1:
            raise ValueError(f"Fee rate must be in [0, 1), got <fee_rate = {self.fee_rate}>.")

        if self.refresh_interval <= 0:
            raise ValueError(f"Refresh interval must be positive, got <refresh_interval = {self.refresh_interval}>.")

        if self.canvas_width <= 0 or self.canvas_height <= 0:
            raise ValueError(f"Canvas size must be positive, got <canvas_width = {self.canvas_width}> and <canvas_height = {self.canvas_height}>.")

        if self.history_points < 0:
            raise ValueError(f"History points must be non-negative, got <history_points = {self.history_points}>.")

        if self.recent_transactions < 0:
            raise ValueError(f"Recent transactions must be non-negative, got <recent_transactions = {self.recent_transactions}>.")


class TradingPlatform:
    """Peer-to-peer energy trading platform."""

    def __init__(self, config: Optional[PlatformConfig] = None) -> None:
        """Initialize the trading platform.

        Args:
            config: Platform configuration parameters
        """
        self.config = config if config is not None else PlatformConfig()

        # Shared state, guarded by the lock
        self._lock = threading.RLock()
        self._participants: Dict[str, Participant] = {}
        self._graph = NetworkGraph()
        self._ledger = TransactionLedger(MarketAnalytics())
        self._suggestion_engine = TradeSuggestionEngine(self._participants,
                                                        self._graph,
                                                        config=self.config.suggestion,
                                                        seed=self.config.seed)

        # Background layout refresh
        self._stop_event = threading.Event()
        self._refresh_thread: Optional[threading.Thread] = None

        if self.config.auto_start:
            self.start()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the periodic layout refresh (no-op if already running)."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._refresh_thread = threading.Thread(target=self._refresh_loop,
                                                name="layout-refresh",
                                                daemon=True)
        self._refresh_thread.start()
        logger.debug("Layout refresh started (every %.1fs)", self.config.refresh_interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the layout refresh to stop and wait for it to exit.

        Args:
            timeout: Maximum time to wait for the thread (None waits indefinitely)
        """
        if self._refresh_thread is None:
            return

        self._stop_event.set()
        self._refresh_thread.join(timeout)
        self._refresh_thread = None
        logger.debug("Layout refresh stopped")

    @property
    def is_running(self) -> bool:
        return self._refresh_thread is not None and self._refresh_thread.is_alive()

    def __enter__(self) -> "TradingPlatform":
        self.start()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.stop()

    def _refresh_loop(self) -> None:
        while not self._stop_event.wait(self.config.refresh_interval):
            self.update_layout()

    def update_layout(self) -> Dict[str, Position]:
        """Recompute the network layout positions.

        Returns:
            Copy of the computed node positions
        """
        with self._lock:
            return self._graph.layout(self.config.canvas_width, self.config.canvas_height)

    # ------------------------------------------------------------------
    # Registry and network
    # ------------------------------------------------------------------

    def register_participant(self, participant: Participant) -> Participant:
        """Register a participant and add it to the trading network.

        Args:
            participant: Participant to register

        Returns:
            The registered participant

        Raises:
            ValueError: If a participant with the same id is already registered
        """
        with self._lock:
            if participant.id in self._participants:
                raise ValueError(f"Participant already registered, got <id = {participant.id}>.")

            self._participants[participant.id] = participant
            self._graph.add_node(participant.id)
            self.update_layout()

        logger.info("Registered %s '%s' (%s)", participant.kind.value, participant.name, participant.id)
        return participant

    def register(self,
                 id: str,
                 name: str,
                 surplus: float,
                 demand: float,
                 balance: float,
                 kind: ParticipantKind = ParticipantKind.PRODUCER) -> Participant:
        """Create and register a participant from a registration tuple.

        Args:
            id: Unique participant identifier
            name: Display name
            surplus: Energy available to sell (kWh)
            demand: Energy still wanted (kWh)
            balance: Currency balance
            kind: Declared participant kind

        Returns:
            The registered participant
        """
        return self.register_participant(Participant(id, name, surplus, demand, balance, kind))

    def link(self, a: str, b: str) -> None:
        """Create a trading link between two registered participants.

        Args:
            a: First participant identifier
            b: Second participant identifier

        Raises:
            ValueError: If the participants are the same or not registered
        """
        if a == b:
            raise ValueError(f"Cannot link a participant to itself, got <a = {a}> and <b = {b}>.")

        with self._lock:
            for participant_id in (a, b):
                if participant_id not in self._participants:
                    raise ValueError(f"Unknown participant, got <id = {participant_id}>.")

            self._graph.add_link(a, b)
            self.update_layout()

        logger.debug("Linked %s <-> %s", a, b)

    def remove_link(self, a: str, b: str) -> None:
        """Remove the trading link between two participants (no-op if absent).

        Args:
            a: First participant identifier
            b: Second participant identifier
        """
        with self._lock:
            self._graph.remove_link(a, b)
            self.update_layout()

    def connected(self, a: str, b: str) -> bool:
        with self._lock:
            return self._graph.connected(a, b)

    def shortest_path(self, start: str, end: str) -> List[str]:
        with self._lock:
            return self._graph.shortest_path(start, end)

    def all_paths(self, start: str, end: str, max_depth: int = 3) -> List[List[str]]:
        with self._lock:
            return self._graph.all_paths(start, end, max_depth)

    def clusters(self) -> List[List[str]]:
        with self._lock:
            return self._graph.clusters()

    def links(self) -> List[Tuple[str, str]]:
        with self._lock:
            return self._graph.links()

    # ------------------------------------------------------------------
    # Trading
    # ------------------------------------------------------------------

    def execute_trade(self,
                      seller_id: str,
                      buyer_id: str,
                      energy: float,
                      price_per_unit: float) -> TradeResult:
        """Execute a trade atomically.

        Infeasible trades are rejected without any state change. On success the
        seller receives the total price minus the platform fee, the buyer pays the
        total price, the trade is recorded and the pair gets linked if it was not.

        Args:
            seller_id: Selling participant identifier
            buyer_id: Buying participant identifier
            energy: Energy to trade (kWh)
            price_per_unit: Price per unit of energy

        Returns:
            Trade result, truthy if the trade was executed

        Raises:
            ValueError: If energy or price is not a positive finite number
        """
        if not math.isfinite(energy) or energy <= 0:
            raise ValueError(f"Energy must be a positive finite number, got <energy = {energy}>.")

        if not math.isfinite(price_per_unit) or price_per_unit <= 0:
            raise ValueError(f"Price per unit must be a positive finite number, got <price_per_unit = {price_per_unit}>.")

        with self._lock:
            result = self._check_trade(seller_id, buyer_id, energy, price_per_unit)
            if result is not None:
                logger.debug("Trade %s -> %s rejected: %s", seller_id, buyer_id, result.message)
                return result

            seller = self._participants[seller_id]
            buyer = self._participants[buyer_id]

            total_cost = energy * price_per_unit
            fee = total_cost * self.config.fee_rate

            timestamp = time.time()
            transaction = Transaction(id=self._ledger.next_id(timestamp),
                                      seller_id=seller_id,
                                      buyer_id=buyer_id,
                                      energy_amount=energy,
                                      price_per_unit=price_per_unit,
                                      timestamp=timestamp,
                                      fee=fee)

            seller.energy_surplus -= energy
            buyer.energy_demand -= energy
            seller.balance += total_cost - fee
            buyer.balance -= total_cost

            self._ledger.record(transaction)
            seller.transaction_ids.append(transaction.id)
            buyer.transaction_ids.append(transaction.id)

            if not self._graph.connected(seller_id, buyer_id):
                self._graph.add_link(seller_id, buyer_id)
                self.update_layout()

        logger.info("Trade %s: %s -> %s, %.2f kWh @ %.3f (fee %.4f)",
                    transaction.id, seller_id, buyer_id, energy, price_per_unit, fee)

        return TradeResult(TradeStatus.EXECUTED, transaction, "Trade executed")

    def _check_trade(self,
                     seller_id: str,
                     buyer_id: str,
                     energy: float,
                     price_per_unit: float) -> Optional[TradeResult]:
        """Check the two-sided trade feasibility.

        Returns:
            A rejection result, or None if the trade is feasible
        """
        seller = self._participants.get(seller_id)
        buyer = self._participants.get(buyer_id)

        if seller is None or buyer is None:
            missing = seller_id if seller is None else buyer_id
            return TradeResult(TradeStatus.UNKNOWN_PARTICIPANT, message=f"Unknown participant: {missing}")

        if seller_id == buyer_id:
            return TradeResult(TradeStatus.SELF_TRADE, message="Cannot trade with self")

        if not seller.can_sell(energy):
            if seller.energy_surplus < energy:
                return TradeResult(TradeStatus.INSUFFICIENT_SURPLUS,
                                   message=f"Insufficient surplus: have {seller.energy_surplus}, need {energy}")
            return TradeResult(TradeStatus.INSUFFICIENT_BALANCE,
                               message=f"Seller balance is negative: {seller.balance}")

        if buyer.energy_demand < energy:
            return TradeResult(TradeStatus.INSUFFICIENT_DEMAND,
                               message=f"Insufficient demand: have {buyer.energy_demand}, need {energy}")

        if not buyer.can_buy(energy, price_per_unit):
            return TradeResult(TradeStatus.INSUFFICIENT_BALANCE,
                               message=f"Insufficient balance: have {buyer.balance}, need {energy * price_per_unit}")

        return None

    def suggestions(self) -> List[TradeSuggestion]:
        """Ranked trade suggestions for the current market state."""
        with self._lock:
            return self._suggestion_engine.generate_suggestions()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def graph(self) -> NetworkGraph:
        return self._graph

    @property
    def ledger(self) -> TransactionLedger:
        return self._ledger

    @property
    def analytics(self) -> MarketAnalytics:
        return self._ledger.analytics

    @property
    def fee_rate(self) -> float:
        return self.config.fee_rate

    def participant(self, participant_id: str) -> Optional[Participant]:
        with self._lock:
            return self._participants.get(participant_id)

    def participants(self) -> List[Participant]:
        with self._lock:
            return list(self._participants.values())

    def sellers(self) -> List[Participant]:
        """Participants with energy left to sell."""
        with self._lock:
            return [p for p in self._participants.values() if p.energy_surplus > 0]

    def buyers(self) -> List[Participant]:
        """Participants with energy demand left to cover."""
        with self._lock:
            return [p for p in self._participants.values() if p.energy_demand > 0]

    def transactions(self) -> List[Transaction]:
        with self._lock:
            return self._ledger.all()

    def transactions_for(self, participant_id: str) -> List[Transaction]:
        with self._lock:
            return self._ledger.for_participant(participant_id)

    def recent_transactions(self, n: Optional[int] = None) -> List[Transaction]:
        with self._lock:
            return self._ledger.recent(self.config.recent_transactions if n is None else n)

    # ------------------------------------------------------------------
    # Statistics and snapshots
    # ------------------------------------------------------------------

    def network_efficiency(self) -> float:
        """Mean inverse hop count over all connected participant pairs.

        Runs one shortest-path search per pair, quadratic in the number of
        participants.

        Returns:
            Network efficiency, 0 if no pair is connected
        """
        with self._lock:
            node_ids = list(self._participants.keys())
            efficiency = 0.0
            path_count = 0

            for i in range(len(node_ids)):
                for j in range(i + 1, len(node_ids)):
                    path = self._graph.shortest_path(node_ids[i], node_ids[j])
                    if path:
                        efficiency += 1.0 / (len(path) - 1)
                        path_count += 1

            return efficiency / path_count if path_count > 0 else 0.0

    def market_stats(self) -> Dict[str, float]:
        """Aggregate market statistics.

        Transaction fees are derived from the total revenue and the current fee
        rate; the exact per-trade sum is available from the ledger.

        Returns:
            Dictionary mapping metric names to values
        """
        with self._lock:
            analytics = self._ledger.analytics
            total_revenue = self._ledger.total_revenue()

            return {"total_energy_traded": self._ledger.total_volume(),
                    "total_revenue": total_revenue,
                    "transaction_fees": total_revenue * self.config.fee_rate,
                    "average_price": analytics.average_price(),
                    "price_volatility": analytics.price_volatility(),
                    "price_trend": analytics.price_trend(),
                    "market_liquidity": analytics.liquidity(),
                    "active_sellers": float(len(self.sellers())),
                    "active_buyers": float(len(self.buyers())),
                    "total_users": float(len(self._participants)),
                    "total_connections": float(self._graph.total_links()),
                    "network_efficiency": self.network_efficiency()}

    def network_snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        """Nodes with layout positions and the deduplicated link list.

        Returns:
            Dictionary with 'nodes' and 'links' lists
        """
        with self._lock:
            default = Position(self.config.canvas_width / 2.0, self.config.canvas_height / 2.0)

            nodes = []
            for participant in self._participants.values():
                position = self._graph.position(participant.id, default)
                node = participant.to_dict()
                node.update({"x": position.x, "y": position.y})
                nodes.append(node)

            links = [{"from": a, "to": b} for a, b in self._graph.links()]

            return {"nodes": nodes, "links": links}

    def price_history(self, max_points: Optional[int] = None) -> List[Dict[str, float]]:
        """Most recent prices as {timestamp, price} points."""
        with self._lock:
            points = self._history_points(max_points)
            return [{"timestamp": t, "price": v} for t, v in self._ledger.analytics.price_history(points)]

    def volume_history(self, max_points: Optional[int] = None) -> List[Dict[str, float]]:
        """Most recent volumes as {timestamp, volume} points."""
        with self._lock:
            points = self._history_points(max_points)
            return [{"timestamp": t, "volume": v} for t, v in self._ledger.analytics.volume_history(points)]

    def transaction_feed(self) -> List[Dict[str, Any]]:
        """Full transaction history as dictionaries, oldest first."""
        with self._lock:
            return [t.to_dict() for t in self._ledger.all()]

    def suggestion_feed(self) -> List[Dict[str, Any]]:
        return [s.to_dict() for s in self.suggestions()]

    def _history_points(self, max_points: Optional[int]) -> int:
        return self.config.history_points if max_points is None else max_points