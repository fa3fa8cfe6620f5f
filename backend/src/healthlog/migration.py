"""One-time import of the legacy ``meals.json`` / ``weight.json`` files.

The originals are copied to the backup directory before anything is written,
then each document replaces the matching tables and the result is read back
for verification.

    python -m healthlog.migration --data-dir server/data
"""
from __future__ import annotations

import argparse
import json
import logging
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from healthlog.core.config import get_settings
from healthlog.core.database import Database
from healthlog.core.errors import StoreError
from healthlog.core.logging import setup_logging
from healthlog.projector import CompatibilityProjector, build_projector

logger = logging.getLogger(__name__)

MEALS_FILE = "meals.json"
WEIGHT_FILE = "weight.json"


@dataclass
class MigrationReport:
    food_items: int = 0
    meals: int = 0
    weight_goal: float = 0
    weight_entries: int = 0
    stale_totals: int = 0
    backed_up: List[str] = field(default_factory=list)


def _load_document(path: Path, backup_dir: Path, report: MigrationReport) -> Optional[Dict[str, Any]]:
    try:
        doc = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("No legacy document at %s", path)
        return None
    except (OSError, ValueError) as exc:
        logger.warning("Cannot read %s: %s", path, exc)
        return None

    if not isinstance(doc, dict):
        logger.warning("Ignoring %s: top level is %s, not an object", path, type(doc).__name__)
        return None

    shutil.copy2(path, backup_dir / path.name)
    report.backed_up.append(path.name)
    logger.info("Backed up %s to %s", path.name, backup_dir)
    return doc


def migrate_legacy_json(
    projector: CompatibilityProjector,
    data_dir: Path,
    backup_dir: Path,
    default_goal: float = 150.0,
) -> MigrationReport:
    report = MigrationReport()
    backup_dir.mkdir(parents=True, exist_ok=True)

    meals_doc = _load_document(data_dir / MEALS_FILE, backup_dir, report)
    if meals_doc is None:
        meals_doc = {"meals": [], "foodDatabase": []}
    else:
        logger.info(
            "Loaded %d meals, %d food items",
            len(meals_doc.get("meals") or []),
            len(meals_doc.get("foodDatabase") or []),
        )

    weight_doc = _load_document(data_dir / WEIGHT_FILE, backup_dir, report)
    if weight_doc is None:
        weight_doc = {"weight": {"goal": default_goal, "daily": []}}

    if meals_doc.get("meals") or meals_doc.get("foodDatabase"):
        projector.import_meals(meals_doc)
        logger.info("Meals data migrated")
    else:
        logger.warning("No meals data to migrate")

    if weight_doc.get("weight"):
        projector.import_weight(weight_doc)
        logger.info("Weight data migrated")
    else:
        logger.warning("No weight data to migrate")

    migrated_meals = projector.export_meals()
    migrated_weight = projector.export_weight()["weight"]
    report.food_items = len(migrated_meals["foodDatabase"])
    report.meals = len(migrated_meals["meals"])
    report.weight_goal = migrated_weight["goal"]
    report.weight_entries = len(migrated_weight["daily"])

    stale = projector.meals.stale_totals()
    report.stale_totals = len(stale)
    for s in stale:
        logger.warning("Day %s: stored total %s, items sum to %s", s.date, s.cached, s.actual)

    return report


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Import legacy JSON documents into the SQLite store.")
    parser.add_argument("--data-dir", type=Path, default=settings.data_dir)
    parser.add_argument("--backup-dir", type=Path, default=None)
    parser.add_argument("--database-url", default=settings.database_url)
    args = parser.parse_args(argv)

    setup_logging(settings.log_level, settings.log_format)
    backup_dir = args.backup_dir or settings.backup_dir or (args.data_dir / "backup")

    database = Database(args.database_url, echo=settings.database_echo)
    try:
        report = migrate_legacy_json(
            build_projector(database),
            args.data_dir,
            backup_dir,
            default_goal=settings.default_goal_weight,
        )
    except (StoreError, OSError) as exc:
        logger.error("Migration failed: %s", exc)
        return 1
    finally:
        database.release()

    logger.info(
        "Migration complete: %d food items, %d meals, goal %s, %d weight entries",
        report.food_items,
        report.meals,
        report.weight_goal,
        report.weight_entries,
    )
    logger.info("Originals backed up to %s", backup_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
