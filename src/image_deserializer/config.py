"""Pydantic frozen configuration models for image_deserializer."""

from typing import Literal

from pydantic import BaseModel, model_validator

from image_deserializer.types import ElementType, SampleLayout

ChunkingPolicy = Literal["sequence", "dataset"]


class InputDescription(BaseModel, frozen=True):
    """A declared input stream, already resolved by the caller."""

    name: str
    element_type: ElementType
    sample_layout: SampleLayout


class DeserializerConfig(BaseModel, frozen=True):
    """Configuration for ImageDataDeserializer.

    ``inputs`` must hold exactly one feature and one label stream; the count
    is enforced by the deserializer itself. ``feature_index`` and
    ``label_index`` select which of the two is which.

    ``chunking`` decides how sequences are grouped for the chunk hooks:
    ``"sequence"`` gives every sequence its own chunk, ``"dataset"`` puts the
    whole manifest in chunk 0.

    ``decoder_mode`` is the PIL mode images are converted to before they are
    exposed. ``None`` keeps the source mode, so the channel count follows
    the file.

    ``relative_to_manifest`` resolves relative image paths against the
    manifest's directory. When off, paths reach the decoder unchanged and
    relative ones resolve against the working directory.
    """

    map_path: str
    inputs: tuple[InputDescription, ...]
    feature_index: int = 0
    label_index: int = 1
    chunking: ChunkingPolicy = "sequence"
    decoder_mode: str | None = "RGB"
    relative_to_manifest: bool = False

    @model_validator(mode="after")
    def _feature_and_label_are_distinct(self) -> "DeserializerConfig":
        for index in (self.feature_index, self.label_index):
            if index not in (0, 1):
                raise ValueError(f"Stream index must be 0 or 1, got {index}")
        if self.feature_index == self.label_index:
            raise ValueError(
                f"feature_index and label_index must differ, both are "
                f"{self.feature_index}"
            )
        return self


class EpochConfiguration(BaseModel, frozen=True):
    """Per-epoch parameters handed down by the minibatch source."""

    worker_rank: int = 0
    number_of_workers: int = 1
    minibatch_size_in_samples: int = 1
    total_epoch_size_in_samples: int | None = None
    index: int = 0
