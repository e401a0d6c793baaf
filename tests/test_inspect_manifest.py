"""Tests for Hydra config composition and the inspect_manifest entrypoint."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import hydra.utils
import pytest
from hydra import compose, initialize_config_dir
from hydra.core.config_store import ConfigStore
from hydra.core.global_hydra import GlobalHydra
from omegaconf import DictConfig

from image_deserializer.data.deserializer import ImageDataDeserializer
from image_deserializer.inspect_manifest import summarize

CONF_DIR = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "src", "image_deserializer", "conf")
)


@pytest.fixture()
def compose_cfg() -> Iterator:
    """Factory fixture composing the inspect_manifest config with overrides."""

    def _compose(overrides: list[str]) -> DictConfig:
        GlobalHydra.instance().clear()
        with initialize_config_dir(config_dir=CONF_DIR, version_base=None):
            return compose(config_name="inspect_manifest", overrides=overrides)

    yield _compose
    GlobalHydra.instance().clear()


def test_deserializer_registered_in_config_store() -> None:
    repo = ConfigStore.instance().repo
    node = repo["data"]["image.yaml"].node
    assert node["_target_"] == (
        "image_deserializer.data.deserializer.ImageDataDeserializer"
    )
    assert node["_convert_"] == "all"


def test_config_composes(compose_cfg, scenario_manifest: Path) -> None:
    cfg = compose_cfg([f"data.map_path={scenario_manifest}"])
    assert cfg.data.map_path == str(scenario_manifest)
    assert cfg.data._target_.endswith("ImageDataDeserializer")
    assert cfg.batch_size == 4
    assert len(cfg.data.inputs) == 2
    assert cfg.data.relative_to_manifest is False


def test_instantiate_from_config(compose_cfg, scenario_manifest: Path) -> None:
    cfg = compose_cfg(
        [f"data.map_path={scenario_manifest}", "data.chunking=dataset"]
    )
    ds = hydra.utils.instantiate(cfg.data)
    assert isinstance(ds, ImageDataDeserializer)
    assert ds.timeline_length() == 2
    assert ds.label_dimension == 10
    assert ds.timeline.chunk_ids == [0]


def test_summarize(compose_cfg, scenario_manifest: Path) -> None:
    cfg = compose_cfg([f"data.map_path={scenario_manifest}"])
    ds = hydra.utils.instantiate(cfg.data)
    summary = summarize(ds, batch_size=cfg.batch_size)
    assert summary["num_sequences"] == 2
    assert summary["num_chunks"] == 2
    assert summary["class_counts"] == {0: 1, 2: 1}
    assert summary["first_batch_shapes"] == [((24, 32, 3), (10,)), ((16, 16, 3), (10,))]


def test_summarize_respects_batch_size(compose_cfg, scenario_manifest: Path) -> None:
    cfg = compose_cfg([f"data.map_path={scenario_manifest}"])
    ds = hydra.utils.instantiate(cfg.data)
    assert len(summarize(ds, batch_size=1)["first_batch_shapes"]) == 1


def test_summarize_empty_manifest(
    compose_cfg, write_manifest
) -> None:
    map_path = write_manifest([], name="empty.txt")
    cfg = compose_cfg([f"data.map_path={map_path}"])
    ds = hydra.utils.instantiate(cfg.data)
    summary = summarize(ds, batch_size=4)
    assert summary["num_sequences"] == 0
    assert summary["first_batch_shapes"] == []


def test_register_decorator_reused_for_several_classes() -> None:
    from image_deserializer.utils.hydra import register

    decorator = register(group="test_register_reuse")

    class First:
        pass

    class Second:
        pass

    assert decorator(First) is First
    assert decorator(Second) is Second
    repo = ConfigStore.instance().repo["test_register_reuse"]
    assert repo["First.yaml"].node["_target_"].endswith(".First")
    assert repo["Second.yaml"].node["_target_"].endswith(".Second")
