"""
Trade suggestion engine for the P2P Energy Marketplace.

This module scans every feasible producer/consumer pair of the registry and ranks
candidate trades with a weighted heuristic combining energy match, buyer balance
adequacy, network proximity and price compatibility. It is a greedy single-pass
ranking, not an optimal assignment.
"""

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Tuple

import numpy as np

from ..agent.participant import Participant
from ..grid.network import NetworkGraph
from .transaction import TradeSuggestion

DEFAULT_REASONS: Tuple[str, ...] = ("Seller surplus covers most of the buyer demand",
                                    "Short network path between both parties",
                                    "Price sits inside the usual market band",
                                    "Buyer balance comfortably covers the trade",
                                    "Direct energy transfer opportunity",
                                    "Production and consumption peaks complement each other")


@dataclass
class SuggestionConfig:
    """Suggestion engine parameters.

    The reference price is only used as a feasibility gate and for scoring; the
    proposed price is drawn from the price band.
    """

    max_suggestions: int = 5  # Number of ranked suggestions returned
    reference_price: float = 0.15  # Unit price used for the balance gate and scoring
    energy_fraction: float = 0.8  # Share of the feasible energy proposed
    min_price: float = 0.12  # Lowest proposed price
    price_step: float = 0.01  # Proposed price increment
    price_steps: int = 8  # Number of proposed price levels
    seller_min_price: float = 0.10  # Lower bound of the acceptable price band
    buyer_max_price: float = 0.20  # Upper bound of the acceptable price band
    energy_scale: float = 100.0  # Energy giving the full energy-match weight
    energy_weight: float = 0.4
    balance_weight: float = 0.3
    partial_balance_weight: float = 0.2
    low_balance_weight: float = 0.1
    proximity_weight: float = 0.2
    price_weight: float = 0.1
    reasons: Tuple[str, ...] = field(default=DEFAULT_REASONS)

    def __post_init__(self) -> None:
        """Validate the suggestion configuration parameters."""
        self._check_init()

    def _check_init(self) -> None:
        """Validate the suggestion configuration parameters."""
        if self.max_suggestions < 0:
            raise ValueError(f"Maximum number of suggestions must be non-negative, got <max_suggestions = {self.max_suggestions}>.")

        if self.reference_price <= 0:
            raise ValueError(f"Reference price must be positive, got <reference_price = {self.reference_price}>.")

        if not 0 < self.energy_fraction <= 1:
            raise ValueError(f"Energy fraction must be in (0, 1], got <energy_fraction = {self.energy_fraction}>.")

        if self.min_price <= 0 or self.price_step < 0 or self.price_steps < 1:
            raise ValueError(f"Invalid price band, got <min_price = {self.min_price}>, <price_step = {self.price_step}> and <price_steps = {self.price_steps}>.")

        if self.seller_min_price > self.buyer_max_price:
            raise ValueError(f"Seller minimum price must not exceed buyer maximum price, got <seller_min_price = {self.seller_min_price}> and <buyer_max_price = {self.buyer_max_price}>.")

        if self.energy_scale <= 0:
            raise ValueError(f"Energy scale must be positive, got <energy_scale = {self.energy_scale}>.")

        if not self.reasons:
            raise ValueError("Reason pool cannot be empty.")


class TradeSuggestionEngine:
    """Proposes and ranks likely trades between registered participants."""

    def __init__(self,
                 participants: Mapping[str, Participant],
                 graph: NetworkGraph,
                 config: Optional[SuggestionConfig] = None,
                 rng: Optional[np.random.Generator] = None,
                 seed: Optional[int] = None) -> None:
        """Initialize the suggestion engine.

        Args:
            participants: Registry mapping participant ids to participants (read only)
            graph: Trading network used for proximity scoring
            config: Suggestion parameters
            rng: Random generator for prices and reasons (built from seed if None)
            seed: Random seed used when no generator is given
        """
        self.participants = participants
        self.graph = graph
        self.config = config if config is not None else SuggestionConfig()
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def reset(self, seed: Optional[int] = None) -> None:
        """Reset the random generator.

        Args:
            seed: Random seed for reproducibility
        """
        self.rng = np.random.default_rng(seed)

    def generate_suggestions(self) -> List[TradeSuggestion]:
        """Rank the feasible trades of the current registry.

        Returns:
            At most max_suggestions suggestions sorted by non-increasing match score
        """
        producers = [p for p in self.participants.values() if p.energy_surplus > 0]
        consumers = [p for p in self.participants.values() if p.energy_demand > 0]

        suggestions = []
        for seller in producers:
            for buyer in consumers:
                if seller.id == buyer.id:
                    continue

                max_energy = min(seller.energy_surplus, buyer.energy_demand)
                if max_energy <= 0 or buyer.balance < max_energy * self.config.reference_price:
                    continue

                path = self.graph.shortest_path(seller.id, buyer.id)
                suggestions.append(TradeSuggestion(seller_id=seller.id,
                                                   buyer_id=buyer.id,
                                                   suggested_energy=max_energy * self.config.energy_fraction,
                                                   suggested_price=self._draw_price(),
                                                   match_score=self.match_score(buyer, max_energy, path),
                                                   path=path,
                                                   reason=self._draw_reason()))

        # Stable sort keeps enumeration order among equal scores
        suggestions.sort(key=lambda s: s.match_score, reverse=True)

        return suggestions[:self.config.max_suggestions]

    def match_score(self,
                    buyer: Participant,
                    energy: float,
                    path: List[str]) -> float:
        """Score a candidate trade.

        Args:
            buyer: Buying participant
            energy: Feasible energy of the pair (kWh)
            path: Shortest network path between seller and buyer (empty if none)

        Returns:
            Match score in [0, 1]
        """
        config = self.config
        score = 0.0

        # Energy match
        score += (energy / config.energy_scale) * config.energy_weight

        # Balance adequacy
        required_balance = energy * config.reference_price
        if buyer.balance >= required_balance * 2:
            score += config.balance_weight
        elif buyer.balance >= required_balance:
            score += config.partial_balance_weight
        else:
            score += config.low_balance_weight

        # Network proximity, by hop count
        if len(path) > 1:
            score += (1.0 / (len(path) - 1)) * config.proximity_weight

        # Price compatibility (always granted with the default constants)
        if config.seller_min_price <= config.reference_price <= config.buyer_max_price:
            score += config.price_weight

        return min(score, 1.0)

    def _draw_price(self) -> float:
        step = int(self.rng.integers(0, self.config.price_steps))
        return round(self.config.min_price + step * self.config.price_step, 6)

    def _draw_reason(self) -> str:
        return self.config.reasons[int(self.rng.integers(0, len(self.config.reasons)))]
