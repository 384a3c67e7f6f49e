"""
Shared platform configuration and utilities for testing.
"""
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from p2p_energy.agent.participant import Participant, ParticipantKind
from p2p_energy.grid.network import NetworkGraph
from p2p_energy.logger import setup_logging
from p2p_energy.market.platform import PlatformConfig, TradingPlatform

setup_logging(level="WARNING")

# (id, name, surplus, demand, balance, kind)
SAMPLE_PARTICIPANTS = [("SOLAR_001", "Solar Farm", 450.0, 0.0, 12000.0, ParticipantKind.PRODUCER),
                       ("HYDRO_001", "Hydro Station", 680.0, 0.0, 18000.0, ParticipantKind.PRODUCER),
                       ("WIND_001", "Wind Array", 320.0, 0.0, 9000.0, ParticipantKind.PRODUCER),
                       ("RES_001", "Residential Complex", 0.0, 280.0, 15000.0, ParticipantKind.CONSUMER),
                       ("TECH_001", "Tech Campus", 0.0, 520.0, 30000.0, ParticipantKind.CONSUMER),
                       ("IND_001", "Industrial Park", 0.0, 750.0, 45000.0, ParticipantKind.CONSUMER),
                       ("GRID_001", "Smart Grid Hub", 180.0, 80.0, 15000.0, ParticipantKind.STORAGE),
                       ("BATT_001", "Battery Storage", 120.0, 40.0, 10000.0, ParticipantKind.STORAGE)]


def create_participants(num_participants=None) -> list[Participant]:
    """Create test participants from the sample registrations.

    Args:
        num_participants: Number of participants (all samples if None)

    Returns:
        List[Participant]: List of participants
    """
    rows = SAMPLE_PARTICIPANTS if num_participants is None else SAMPLE_PARTICIPANTS[:num_participants]
    return [Participant(*row) for row in rows]


def create_platform(num_participants=None,
                    seed=42,
                    fee_rate=0.02,
                    links=None) -> TradingPlatform:
    """Create a test trading platform with registered participants.

    Args:
        num_participants: Number of sample participants (all samples if None)
        seed: Seed of the suggestion engine
        fee_rate: Platform fee rate
        links: Optional list of (a, b) links to create

    Returns:
        TradingPlatform: Trading platform
    """
    platform = TradingPlatform(PlatformConfig(fee_rate=fee_rate, seed=seed))

    for participant in create_participants(num_participants):
        platform.register_participant(participant)

    for a, b in links or []:
        platform.link(a, b)

    return platform


def create_chain_graph(nodes=("A", "B", "C", "D")) -> NetworkGraph:
    """Create a network where consecutive nodes are linked.

    Args:
        nodes: Node identifiers in chain order

    Returns:
        NetworkGraph: Network graph
    """
    graph = NetworkGraph()
    for a, b in zip(nodes, nodes[1:]):
        graph.add_link(a, b)
    return graph
