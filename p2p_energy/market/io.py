"""
Platform data import/export utilities.

This module writes the rendering-layer feeds (network snapshot, histories,
transaction feed, market statistics, suggestions) to JSON files and loads
participant registrations and links from a JSON file.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..agent.participant import Participant, ParticipantKind
from ..root import __main__
from .platform import TradingPlatform

logger = logging.getLogger(__name__)

REQUIRED_PARTICIPANT_KEYS = ("id", "name", "surplus", "demand", "balance")


class PlatformIOHandler:
    """Manages serialization of platform feeds and loading of registration data."""

    @staticmethod
    def feeds(platform: TradingPlatform) -> Dict[str, Any]:
        """Collect every feed consumed by the rendering layer.

        Args:
            platform: Trading platform

        Returns:
            Dictionary mapping feed names to JSON-serializable values
        """
        return {"network": platform.network_snapshot(),
                "price_history": platform.price_history(),
                "volume_history": platform.volume_history(),
                "transactions": platform.transaction_feed(),
                "market_stats": platform.market_stats(),
                "suggestions": platform.suggestion_feed()}

    @staticmethod
    def export(platform: TradingPlatform,
               storage_path: Optional[str] = None) -> Path:
        """Write every feed to its own JSON file.

        Args:
            platform: Trading platform
            storage_path: Directory where to write the files (default: downloads/)

        Returns:
            Directory containing the written files
        """
        # Ensure storage_path is a Path object
        storage_path = Path(__main__) / "downloads" if storage_path is None else Path(storage_path)

        # Create directory if it doesn't exist
        storage_path.mkdir(parents=True, exist_ok=True)

        for name, feed in PlatformIOHandler.feeds(platform).items():
            with open(storage_path / f"{name}.json", "w") as f:
                json.dump(feed, f, indent=2)

        logger.info("Exported platform feeds to %s", storage_path)
        return storage_path

    @staticmethod
    def load_participants(file_path: str) -> Tuple[List[Participant], List[Tuple[str, str]]]:
        """Load participant registrations and links from a JSON file.

        The file holds {"participants": [{id, name, surplus, demand, balance, kind}],
        "links": [[a, b], ...]}; "links" and "kind" are optional.

        Args:
            file_path: Path to the JSON file

        Returns:
            Tuple of (participants, links)

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If a participant entry misses a required key
        """
        data_path = Path(file_path)

        if not data_path.exists():
            raise FileNotFoundError(f"Participant data not found at: {data_path}")

        with open(data_path, "r") as f:
            data = json.load(f)

        participants = []
        for entry in data.get("participants", []):
            missing = [key for key in REQUIRED_PARTICIPANT_KEYS if key not in entry]
            if missing:
                raise ValueError(f"Participant entry is missing keys {missing}, got <entry = {entry}>.")

            participants.append(Participant(id=entry["id"],
                                            name=entry["name"],
                                            energy_surplus=entry["surplus"],
                                            energy_demand=entry["demand"],
                                            balance=entry["balance"],
                                            kind=ParticipantKind(entry.get("kind", ParticipantKind.PRODUCER.value))))

        links = []
        for link in data.get("links", []):
            if len(link) != 2:
                raise ValueError(f"Link must name exactly two participants, got <link = {link}>.")
            links.append((link[0], link[1]))

        return participants, links

    @staticmethod
    def populate(platform: TradingPlatform, file_path: str) -> None:
        """Register and link the participants stored in a JSON file.

        Args:
            platform: Trading platform to populate
            file_path: Path to the JSON file
        """
        participants, links = PlatformIOHandler.load_participants(file_path)

        for participant in participants:
            platform.register_participant(participant)

        for a, b in links:
            platform.link(a, b)
