"""Single-file JSON backup of every vehicle and trip."""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from garage_log.models.data_records import BackupBundle, TripRecord
from garage_log.models.vehicle import Vehicle

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"


class BackupExporter:
    """Export and read backup bundles."""

    @staticmethod
    def export_bundle(
        vehicles: Sequence[Vehicle],
        trips: Sequence[TripRecord],
        output_path: Path,
        version: str = BACKUP_VERSION,
    ) -> bool:
        """
        Write all vehicles and trips to a JSON bundle.

        Args:
            vehicles: Garage contents, refills included
            trips: Recorded trips
            output_path: Destination file path (.json)
            version: Bundle format version

        Returns:
            True if export succeeded, False on error
        """
        bundle = BackupBundle(
            version=version,
            vehicles=list(vehicles),
            trips=list(trips),
            timestamp=time.time(),
        )

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(bundle.to_dict(), f, indent=2)

            logger.info(
                "Exported %d vehicles and %d trips to %s",
                len(bundle.vehicles),
                len(bundle.trips),
                output_path,
            )
            return True

        except Exception as e:
            logger.error("Backup export failed: %s", e)
            return False

    @staticmethod
    def read_bundle(path: Path) -> Optional[BackupBundle]:
        """
        Read and fully decode a bundle.

        Args:
            path: Bundle file written by export_bundle()

        Returns:
            The decoded bundle, or None if the file is missing or corrupt
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            return BackupBundle.from_dict(data)
        except Exception as e:
            logger.error("Backup read failed for %s: %s", path, e)
            return None

    @staticmethod
    def generate_filename(ts: float) -> str:
        """
        Generate a filename for a backup.

        Args:
            ts: Backup timestamp

        Returns:
            Filename like "garage_backup_2024-01-15.json"
        """
        dt = datetime.fromtimestamp(ts)
        return f"garage_backup_{dt.strftime('%Y-%m-%d')}.json"
