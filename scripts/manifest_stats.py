#!/usr/bin/env python3
"""Print class and decode statistics for an image manifest.

Builds the timeline the deserializer would use, counts sequences per class
and optionally checks that every image decodes.

Usage::

    python scripts/manifest_stats.py --map-path data/train_map.txt --num-classes 10
    python scripts/manifest_stats.py --map-path data/train_map.txt \
        --num-classes 10 --check-decode
"""

from __future__ import annotations

import argparse
import sys
from collections import Counter
from pathlib import Path

from loguru import logger
from rich.console import Console
from rich.table import Table

# Add project root to path so we can import image_deserializer
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from image_deserializer.data.decoding import PILImageDecoder  # noqa: E402
from image_deserializer.data.timeline import Timeline, build_timeline  # noqa: E402
from image_deserializer.errors import DecodeError  # noqa: E402


def class_histogram(timeline: Timeline, num_classes: int) -> list[int]:
    """Sequences per class id, including classes with zero sequences."""
    counts = Counter(d.class_id for d in timeline)
    return [counts.get(c, 0) for c in range(num_classes)]


def find_undecodable(
    timeline: Timeline, base_dir: Path | None = None
) -> list[tuple[int, str]]:
    """Return ``(id, reason)`` for every sequence whose image fails to decode.

    Relative paths resolve against ``base_dir`` when given, otherwise
    against the working directory, matching the deserializer.
    """
    decoder = PILImageDecoder()
    failures: list[tuple[int, str]] = []
    for description in timeline:
        path = Path(description.path)
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        try:
            decoder.decode(path)
        except DecodeError as e:
            failures.append((description.id, str(e)))
    return failures


def main() -> None:
    parser = argparse.ArgumentParser(description="Image manifest statistics")
    parser.add_argument(
        "--map-path", type=Path, required=True, help="Tab-delimited manifest file"
    )
    parser.add_argument(
        "--num-classes",
        type=int,
        required=True,
        help="Label dimension; class ids must be below it",
    )
    parser.add_argument(
        "--check-decode",
        action="store_true",
        help="Decode every image and report failures",
    )
    parser.add_argument(
        "--relative-to-manifest",
        action="store_true",
        help="Resolve relative image paths against the manifest directory",
    )
    args = parser.parse_args()

    timeline = build_timeline(args.map_path, args.num_classes)
    histogram = class_histogram(timeline, args.num_classes)

    console = Console()
    table = Table(title=f"Class distribution: {args.map_path.name}")
    table.add_column("Class", style="cyan")
    table.add_column("Sequences", justify="right")
    table.add_column("Share", justify="right", style="green")
    total = len(timeline)
    for class_id, count in enumerate(histogram):
        share = count / total if total else 0.0
        table.add_row(str(class_id), str(count), f"{share:.1%}")
    console.print(table)

    empty = [c for c, n in enumerate(histogram) if n == 0]
    if empty:
        logger.warning(f"{len(empty)} class(es) have no sequences: {empty}")

    if args.check_decode:
        failures = find_undecodable(
            timeline, args.map_path.parent if args.relative_to_manifest else None
        )
        for sequence_id, reason in failures:
            logger.error(f"id={sequence_id}: {reason}")
        logger.info(f"Decode check: {total - len(failures)}/{total} images OK")
        if failures:
            sys.exit(1)


if __name__ == "__main__":
    main()
