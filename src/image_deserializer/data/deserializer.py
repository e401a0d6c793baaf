"""Deserializers that materialize (feature, label) sequences by id."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import torch
from loguru import logger

from image_deserializer.config import (
    ChunkingPolicy,
    DeserializerConfig,
    EpochConfiguration,
    InputDescription,
)
from image_deserializer.data.decoding import ImageDecoder, PILImageDecoder
from image_deserializer.data.timeline import (
    SequenceDescription,
    Timeline,
    build_timeline,
)
from image_deserializer.errors import ConfigurationError, DecodeError
from image_deserializer.labels import create_label_generator
from image_deserializer.types import SampleLayout, SequenceData, SequencePair
from image_deserializer.utils.hydra import register


class DataDeserializer(ABC):
    """Interface between a minibatch source and one physical dataset.

    The source reads the timeline once to plan minibatches, then asks for
    payloads by id. ``require_chunk``/``release_chunk`` are advisory hints
    about which chunks will be requested soon; implementations backed by
    container files may use them to prefetch or evict.
    """

    @property
    @abstractmethod
    def timeline(self) -> Timeline:
        """The immutable catalog of sequences."""

    def timeline_length(self) -> int:
        return len(self.timeline)

    def lookup(self, sequence_id: int) -> SequenceDescription:
        return self.timeline.lookup(sequence_id)

    @abstractmethod
    def set_epoch_configuration(self, config: EpochConfiguration) -> None:
        """Receive the parameters of the epoch about to start."""

    @abstractmethod
    def get_sequences_by_id(self, ids: Sequence[int]) -> list[SequencePair]:
        """Materialize payloads for ``ids``, one pair per id, in input order."""

    @abstractmethod
    def require_chunk(self, chunk_id: int) -> bool:
        """Pin a chunk. Returns whether it is resident."""

    @abstractmethod
    def release_chunk(self, chunk_id: int) -> None:
        """Unpin a chunk."""


@register(group="data", name="image", _convert_="all")
class ImageDataDeserializer(DataDeserializer):
    """Deserializer for a ``<path>\\t<classId>`` image manifest.

    Images are decoded on demand on every request; nothing is cached across
    batches. Feature tensors of the most recent batch are the only ones kept
    alive, and they are dropped as soon as the next batch is requested.
    Labels are one-hot vectors copied out of a single reused buffer.

    The whole manifest is treated as always resident, so the chunk hooks are
    no-ops.

    Args:
        config: Frozen DeserializerConfig. If provided, flat kwargs are ignored.
        decoder: Image decoder; defaults to a PILImageDecoder using
            ``config.decoder_mode``.
        map_path: Manifest path (used when config is None, e.g. Hydra).
        inputs: Exactly two stream declarations (feature and label).
        feature_index: Position of the feature stream in ``inputs``.
        label_index: Position of the label stream in ``inputs``.
        chunking: Chunk grouping policy for the timeline.
        decoder_mode: PIL mode for the default decoder.
        relative_to_manifest: Resolve relative image paths against the
            manifest directory instead of the working directory.
        **kwargs: Absorbs extra Hydra-injected keys.
    """

    def __init__(
        self,
        config: DeserializerConfig | None = None,
        *,
        decoder: ImageDecoder | None = None,
        map_path: str = "",
        inputs: Sequence[InputDescription | dict[str, Any]] = (),
        feature_index: int = 0,
        label_index: int = 1,
        chunking: ChunkingPolicy = "sequence",
        decoder_mode: str | None = "RGB",
        relative_to_manifest: bool = False,
        **kwargs: Any,
    ) -> None:
        if config is not None:
            self._config = config
        else:
            self._config = DeserializerConfig(
                map_path=map_path,
                inputs=tuple(inputs),  # type: ignore[arg-type]
                feature_index=feature_index,
                label_index=label_index,
                chunking=chunking,
                decoder_mode=decoder_mode,
                relative_to_manifest=relative_to_manifest,
            )
        cfg = self._config

        if len(cfg.inputs) != 2:
            raise ConfigurationError(
                f"ImageDataDeserializer needs exactly 2 inputs (feature and label), "
                f"got {len(cfg.inputs)}"
            )
        feature = cfg.inputs[cfg.feature_index]
        label = cfg.inputs[cfg.label_index]

        self.feature_input = feature
        self.label_input = label
        self._feature_dtype = feature.element_type.torch_dtype
        self._label_layout = label.sample_layout
        label_dimension = label.sample_layout.num_elements

        self._label_generator = create_label_generator(
            label.element_type, label_dimension
        )
        self._decoder = (
            decoder if decoder is not None else PILImageDecoder(cfg.decoder_mode)
        )
        self._map_path = Path(cfg.map_path)
        self._timeline = build_timeline(self._map_path, label_dimension, cfg.chunking)

        # Feature tensors of the in-flight batch; replaced on every request.
        self._current_images: list[torch.Tensor] = []

        logger.debug(
            f"ImageDataDeserializer: features='{feature.name}' "
            f"({feature.element_type.value}), labels='{label.name}' "
            f"({label.element_type.value}, dim={label_dimension})"
        )

    @property
    def config(self) -> DeserializerConfig:
        return self._config

    @property
    def timeline(self) -> Timeline:
        return self._timeline

    @property
    def label_dimension(self) -> int:
        return self._label_generator.dimension

    @property
    def retained_features(self) -> tuple[torch.Tensor, ...]:
        """Feature tensors still held from the most recent batch."""
        return tuple(self._current_images)

    def set_epoch_configuration(self, config: EpochConfiguration) -> None:
        # Epoch boundaries do not change how sequences are materialized.
        logger.debug(f"Epoch configuration ignored: {config}")

    def get_sequences_by_id(self, ids: Sequence[int]) -> list[SequencePair]:
        """Decode features and encode labels for ``ids``.

        Feature tensors returned by the previous call are released before
        any decoding starts. Either every id is materialized or an error is
        raised; no partial batch is returned.

        Raises:
            ValueError: If ``ids`` is empty.
            SequenceIdError: If any id is outside the timeline.
            DecodeError: If an image cannot be decoded.
        """
        if len(ids) == 0:
            raise ValueError("get_sequences_by_id needs at least one id")
        descriptions = [self._timeline.lookup(i) for i in ids]

        self._current_images.clear()

        result: list[SequencePair] = []
        try:
            for description in descriptions:
                result.append(self._materialize(description))
        except DecodeError:
            self._current_images.clear()
            raise

        logger.debug(f"Materialized {len(result)} sequence(s)")
        return result

    def _materialize(self, description: SequenceDescription) -> SequencePair:
        try:
            decoded = self._decoder.decode(self._resolve(description.path))
        except DecodeError as e:
            raise DecodeError(e.path, str(e.__cause__ or e), description.id) from e

        pixels = decoded.pixels
        if pixels.dtype != self._feature_dtype:
            pixels = pixels.to(self._feature_dtype)
        self._current_images.append(pixels)

        features: SequenceData = {
            "data": pixels,
            "layout": SampleLayout.whc(
                decoded.width, decoded.height, decoded.channels
            ),
            "number_of_samples": description.number_of_samples,
        }
        labels: SequenceData = {
            "data": self._label_generator.generate(description.class_id).clone(),
            "layout": self._label_layout,
            "number_of_samples": description.number_of_samples,
        }
        return {"features": features, "labels": labels}

    def _resolve(self, path: str) -> str | Path:
        """Return the decoder locator for a manifest path.

        The path is passed through unchanged unless ``relative_to_manifest``
        is set and the path is relative.
        """
        if not self._config.relative_to_manifest or Path(path).is_absolute():
            return path
        return self._map_path.parent / path

    def require_chunk(self, chunk_id: int) -> bool:
        return True

    def release_chunk(self, chunk_id: int) -> None:
        pass

    def __repr__(self) -> str:
        return (
            f"ImageDataDeserializer(map_path={str(self._map_path)!r}, "
            f"sequences={len(self._timeline)}, "
            f"label_dimension={self.label_dimension})"
        )
