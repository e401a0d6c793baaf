"""Shared pytest fixtures for image_deserializer tests."""

from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image

from image_deserializer.config import DeserializerConfig, InputDescription
from image_deserializer.types import ElementType, SampleLayout


@pytest.fixture()
def image_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Small PNG images next to where manifests are written.

    The working directory is switched to ``tmp_path`` so that relative
    manifest paths resolve to these images.

    - img0.png: RGB, 32 wide x 24 high, filled with (10, 20, 30)
    - img1.png: RGB, 16 x 16, filled with (200, 100, 50)
    - gray.png: grayscale (L), 8 x 6
    - rgba.png: RGBA, 4 x 4
    """
    Image.new("RGB", (32, 24), color=(10, 20, 30)).save(tmp_path / "img0.png")
    Image.new("RGB", (16, 16), color=(200, 100, 50)).save(tmp_path / "img1.png")
    Image.new("L", (8, 6), color=128).save(tmp_path / "gray.png")
    Image.new("RGBA", (4, 4), color=(1, 2, 3, 4)).save(tmp_path / "rgba.png")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def write_manifest(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing manifest rows (one string per line) to ``tmp_path``."""

    def _write(lines: list[str], name: str = "map.txt") -> Path:
        path = tmp_path / name
        path.write_text("".join(f"{line}\n" for line in lines))
        return path

    return _write


@pytest.fixture()
def scenario_manifest(image_dir: Path, write_manifest: Callable[..., Path]) -> Path:
    """Two rows: img0.png with class 0, img1.png with class 2."""
    return write_manifest(["img0.png\t0", "img1.png\t2"])


@pytest.fixture()
def make_config() -> Callable[..., DeserializerConfig]:
    """Factory building a feature+label DeserializerConfig for a manifest."""

    def _make(
        map_path: Path,
        label_dimension: int = 3,
        feature_type: ElementType = ElementType.FLOAT32,
        label_type: ElementType = ElementType.FLOAT32,
        **kwargs: object,
    ) -> DeserializerConfig:
        return DeserializerConfig(
            map_path=str(map_path),
            inputs=(
                InputDescription(
                    name="features",
                    element_type=feature_type,
                    sample_layout=SampleLayout.whc(32, 24, 3),
                ),
                InputDescription(
                    name="labels",
                    element_type=label_type,
                    sample_layout=SampleLayout.vector(label_dimension),
                ),
            ),
            **kwargs,  # type: ignore[arg-type]
        )

    return _make
