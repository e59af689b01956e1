"""Application settings with persistence."""

from __future__ import annotations

import json
import logging
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


def _default_fuel_types() -> List[str]:
    return ["Petrol", "Diesel", "Electric", "Hybrid", "LPG"]


@dataclass
class Settings:
    """
    Application settings with defaults and JSON persistence.

    Distances are in km, volumes in liters, speeds in km/h.
    """

    # Storage
    db_filename: str = "garage_log.db"
    backup_version: str = "1.0"

    # Refill entry
    default_fuel_type: str = "Petrol"
    fuel_types: List[str] = field(default_factory=_default_fuel_types)
    currency_symbol: str = "€"

    # Trip statistics
    red_zone_kmh: float = 150.0
    sample_interval_secs: float = 1.0  # GPS sampling period assumed by red zone timing

    @classmethod
    def load(cls, path: Optional[Path] = None) -> Settings:
        """
        Load settings from JSON file.

        Args:
            path: Optional custom path. Uses default if None.

        Returns:
            Settings instance (defaults if file doesn't exist or fails)
        """
        if path is None:
            path = cls._default_path()

        try:
            if path.exists():
                with open(path, encoding="utf-8") as f:
                    data = json.load(f)
                # Filter to only known fields (ignore obsolete settings)
                known_fields = {f.name for f in cls.__dataclass_fields__.values()}
                filtered = {k: v for k, v in data.items() if k in known_fields}
                return cls(**filtered)
        except Exception as e:
            logger.error("Failed to load settings: %s", e)

        return cls()

    def save(self, path: Optional[Path] = None) -> bool:
        """
        Save settings to JSON file.

        Args:
            path: Optional custom path. Uses default if None.

        Returns:
            True if saved successfully
        """
        if path is None:
            path = self._default_path()

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(asdict(self), f, indent=2)
            return True
        except Exception as e:
            logger.error("Failed to save settings: %s", e)
            return False

    @staticmethod
    def _default_path() -> Path:
        """Get default settings file location."""
        if platform.system() == "Windows":
            base = Path.home() / ".garage_log"
        else:
            base = Path.home() / ".local" / "share" / "garage_log"
        return base / "settings.json"

    def reset_to_defaults(self) -> None:
        """Reset all settings to their default values."""
        defaults = Settings()
        for field_name in self.__dataclass_fields__:
            setattr(self, field_name, getattr(defaults, field_name))
