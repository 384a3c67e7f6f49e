"""
Trading network topology for the P2P Energy Marketplace.

This module models the undirected trading relationships between participants and
provides the traversal algorithms used by the suggestion engine and the platform
statistics: shortest path, bounded path enumeration, clustering and a radial layout.
"""

from typing import Dict, List, Optional, Tuple

import networkx as nx
import numpy as np

from .base import DEFAULT_CANVAS_HEIGHT, DEFAULT_CANVAS_WIDTH, LAYOUT_RADIUS_FACTOR, Position


class NetworkGraph:
    """Undirected trading network over participant identifiers.

    Queries on unknown nodes never raise: they return an empty list or False, so
    callers do not have to check for existence first.
    """

    def __init__(self) -> None:
        """Initialize an empty trading network."""
        # Neighbor order follows insertion order, which drives BFS tie-breaking
        self.graph: nx.Graph = nx.Graph()
        self.positions: Dict[str, Position] = {}

    def add_node(self, node_id: str) -> None:
        """Add an isolated node to the network (no-op if it already exists).

        Args:
            node_id: Participant identifier
        """
        self.graph.add_node(node_id)

    def add_link(self, a: str, b: str) -> None:
        """Add an undirected link between two nodes (no-op if already linked).

        Args:
            a: First participant identifier
            b: Second participant identifier
        """
        if not self.graph.has_edge(a, b):
            self.graph.add_edge(a, b)

    def remove_link(self, a: str, b: str) -> None:
        """Remove the link between two nodes (no-op if it does not exist).

        Args:
            a: First participant identifier
            b: Second participant identifier
        """
        if self.graph.has_edge(a, b):
            self.graph.remove_edge(a, b)

    def has_node(self, node_id: str) -> bool:
        return self.graph.has_node(node_id)

    def nodes(self) -> List[str]:
        return list(self.graph.nodes)

    def neighbors(self, node_id: str) -> List[str]:
        """Get the neighbors of a node.

        Args:
            node_id: Participant identifier

        Returns:
            Neighbor identifiers in insertion order (empty if the node is unknown)
        """
        if not self.graph.has_node(node_id):
            return []
        return list(self.graph.neighbors(node_id))

    def connected(self, a: str, b: str) -> bool:
        """Check whether two nodes share a direct link.

        Args:
            a: First participant identifier
            b: Second participant identifier

        Returns:
            True if the link exists, False otherwise (including unknown nodes)
        """
        return self.graph.has_edge(a, b)

    def total_links(self) -> int:
        """Number of undirected links in the network."""
        return self.graph.number_of_edges()

    def links(self) -> List[Tuple[str, str]]:
        """Deduplicated undirected links, each reported once.

        Returns:
            List of (a, b) pairs
        """
        return [(a, b) for a, b in self.graph.edges()]

    def shortest_path(self, start: str, end: str) -> List[str]:
        """Find a shortest path between two nodes with a breadth-first search.

        Among equally short paths, the one discovered first (following neighbor
        insertion order) is returned.

        Args:
            start: Source participant identifier
            end: Target participant identifier

        Returns:
            Identifiers from start to end inclusive, or an empty list if start equals
            end, either node is unknown, or no path exists
        """
        if start == end or not self.graph.has_node(start) or not self.graph.has_node(end):
            return []

        parents = {start: None}
        for parent, child in nx.bfs_edges(self.graph, start):
            parents[child] = parent
            if child == end:
                break

        if end not in parents:
            return []

        # Walk back from the target to the source
        path = [end]
        while parents[path[-1]] is not None:
            path.append(parents[path[-1]])

        return path[::-1]

    def all_paths(self, start: str, end: str, max_depth: int = 3) -> List[List[str]]:
        """Enumerate every simple path between two nodes up to a maximum length.

        Partial paths are expanded breadth-first, so shorter paths come out first.

        Args:
            start: Source participant identifier
            end: Target participant identifier
            max_depth: Maximum number of edges per path

        Returns:
            List of paths, each a list of identifiers from start to end
        """
        if max_depth < 0:
            raise ValueError(f"Maximum path depth must be non-negative, got <max_depth = {max_depth}>.")

        if not self.graph.has_node(start) or not self.graph.has_node(end):
            return []

        paths = []
        frontier = [[start]]
        while frontier:
            next_frontier = []
            for path in frontier:
                if path[-1] == end:
                    paths.append(path)
                    continue

                if len(path) - 1 >= max_depth:
                    continue

                for neighbor in self.graph.neighbors(path[-1]):
                    if neighbor not in path:
                        next_frontier.append(path + [neighbor])

            frontier = next_frontier

        return paths

    def clusters(self) -> List[List[str]]:
        """Partition the known nodes into connected components.

        Returns:
            One identifier list per component, in BFS discovery order
        """
        clusters = []
        visited = set()

        for node in self.graph.nodes:
            if node in visited:
                continue

            cluster = [node] + [child for _, child in nx.bfs_edges(self.graph, node)]
            visited.update(cluster)
            clusters.append(cluster)

        return clusters

    def layout(self,
               width: float = DEFAULT_CANVAS_WIDTH,
               height: float = DEFAULT_CANVAS_HEIGHT) -> Dict[str, Position]:
        """Place every known node evenly on a circle centered in the canvas.

        Previously computed positions are discarded.

        Args:
            width: Canvas width
            height: Canvas height

        Returns:
            Copy of the computed node positions
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive, got <width = {width}> and <height = {height}>.")

        self.positions = {}

        nodes = list(self.graph.nodes)
        center_x, center_y = width / 2.0, height / 2.0
        radius = min(width, height) * LAYOUT_RADIUS_FACTOR

        for i, node in enumerate(nodes):
            angle = 2 * np.pi * i / len(nodes)
            self.positions[node] = Position(float(center_x + radius * np.cos(angle)),
                                            float(center_y + radius * np.sin(angle)))

        return dict(self.positions)

    def position(self, node_id: str, default: Optional[Position] = None) -> Optional[Position]:
        """Get the last computed position of a node.

        Args:
            node_id: Participant identifier
            default: Value returned when the node has no position

        Returns:
            Node position or the default
        """
        return self.positions.get(node_id, default)
