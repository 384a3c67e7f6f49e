"""
Base classes for the trading network.

This module provides the layout primitives shared by the network graph and the
platform snapshot.
"""

from dataclasses import dataclass
from typing import Tuple

DEFAULT_CANVAS_WIDTH = 800
DEFAULT_CANVAS_HEIGHT = 600
LAYOUT_RADIUS_FACTOR = 0.35  # Circle radius as a fraction of the smaller canvas side


@dataclass(frozen=True)
class Position:
    """Represents a node position on the rendering canvas."""
    x: float  # Canvas x-coordinate
    y: float  # Canvas y-coordinate

    def as_tuple(self) -> Tuple[float, float]:
        """Return the position as an (x, y) tuple."""
        return (self.x, self.y)
