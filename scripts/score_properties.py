#!/usr/bin/env python3
"""CLI script to compute proximity scores for apartments loaded from CKAN."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Ensure the project source is importable when running the script directly.
_project_root = Path(__file__).resolve().parent.parent
_src = _project_root / "src"
if str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from thaihousing.ckan.client import CkanClient  # noqa: E402
from thaihousing.core.catalog import Catalog  # noqa: E402
from thaihousing.core.config import Settings  # noqa: E402
from thaihousing.housing.service import ApartmentService  # noqa: E402
from thaihousing.proximity.overpass import OverpassClient  # noqa: E402
from thaihousing.proximity.scorer import ProximityScorer  # noqa: E402
from thaihousing.proximity.scoring import score_statistics  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Score apartments by proximity to nearby services."
    )
    parser.add_argument("--limit", type=int, default=None, help="Maximum properties to score.")
    parser.add_argument("--output", type=str, default=None, help="Path to write scores as JSON.")
    return parser.parse_args()


async def main() -> None:
    args = parse_args()
    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper())

    ckan = CkanClient(settings.ckan)
    overpass = OverpassClient(settings.overpass)
    try:
        service = ApartmentService(ckan, Catalog(settings.catalog_path))
        properties = await service.list_properties()
        print(f"Loaded {len(properties)} properties")

        scorer = ProximityScorer(overpass, config=settings.proximity, overpass_config=settings.overpass)
        scores = await scorer.score_many(properties, limit=args.limit)
    finally:
        await ckan.close()
        await overpass.close()

    stats = score_statistics(scores.values())
    print(f"Scored {len(scores)} properties, average {stats.average}")
    for band, count in stats.distribution.items():
        print(f"  {band:<10} {count}")

    if args.output:
        Path(args.output).write_text(json.dumps(scores, indent=2, ensure_ascii=False))
        print(f"Scores written to {args.output}")


if __name__ == "__main__":
    asyncio.run(main())
