"""Hydra entrypoint: build a deserializer and report on its timeline.

Usage:
    inspect-manifest data.map_path=/data/train_map.txt
    inspect-manifest data.map_path=/data/train_map.txt batch_size=16
"""

import sys
from collections import Counter
from typing import Any

import hydra
from loguru import logger
from omegaconf import DictConfig, OmegaConf

# Import triggers the @register decorator before Hydra resolves defaults
from image_deserializer.data.deserializer import DataDeserializer


def summarize(deserializer: DataDeserializer, batch_size: int) -> dict[str, Any]:
    """Collect timeline statistics and materialize the first batch.

    Returns a dict with the sequence count, chunk count, per-class counts and
    the feature/label shapes of the first ``batch_size`` sequences.
    """
    timeline = deserializer.timeline
    class_counts = Counter(d.class_id for d in timeline)
    logger.info(
        f"Timeline: {len(timeline)} sequence(s), {len(timeline.chunk_ids)} chunk(s), "
        f"{len(class_counts)} class(es) present"
    )

    ids = list(range(min(batch_size, len(timeline))))
    shapes: list[tuple[tuple[int, ...], tuple[int, ...]]] = []
    if ids:
        for chunk_id in {timeline[i].chunk_id for i in ids}:
            deserializer.require_chunk(chunk_id)
        for pair in deserializer.get_sequences_by_id(ids):
            shapes.append(
                (
                    tuple(pair["features"]["data"].shape),
                    tuple(pair["labels"]["data"].shape),
                )
            )
        for chunk_id in {timeline[i].chunk_id for i in ids}:
            deserializer.release_chunk(chunk_id)
        for i, (feat, lab) in zip(ids, shapes):
            logger.info(f"  id={i} path={timeline[i].path} features={feat} labels={lab}")

    return {
        "num_sequences": len(timeline),
        "num_chunks": len(timeline.chunk_ids),
        "class_counts": dict(sorted(class_counts.items())),
        "first_batch_shapes": shapes,
    }


@hydra.main(version_base=None, config_path="conf", config_name="inspect_manifest")
def main(cfg: DictConfig) -> None:
    """Instantiate the configured deserializer and log a summary."""
    logger.remove()
    logger.add(sys.stderr, level=cfg.get("log_level", "INFO"))

    logger.info(f"Configuration:\n{OmegaConf.to_yaml(cfg)}")

    deserializer: DataDeserializer = hydra.utils.instantiate(cfg.data)
    summarize(deserializer, cfg.get("batch_size", 4))


if __name__ == "__main__":
    main()
