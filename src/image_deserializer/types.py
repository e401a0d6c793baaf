"""Element types, sample layouts and payload contracts for image_deserializer."""

from __future__ import annotations

import math
from enum import StrEnum
from typing import TypedDict

import torch
from pydantic import BaseModel, model_validator

_TORCH_DTYPES: dict[str, torch.dtype] = {
    "float16": torch.float16,
    "float32": torch.float32,
    "float64": torch.float64,
}


class ElementType(StrEnum):
    """Numeric representation of a stream's tensors.

    Fixed per stream at configuration time.
    """

    FLOAT16 = "float16"
    FLOAT32 = "float32"
    FLOAT64 = "float64"

    @property
    def torch_dtype(self) -> torch.dtype:
        return _TORCH_DTYPES[self.value]


class SampleLayout(BaseModel, frozen=True):
    """Axis extents of one sample's tensor.

    Image layouts list extents as width x height x channels; a label layout
    is a single axis whose extent is the label dimensionality.
    """

    dims: tuple[int, ...]

    @model_validator(mode="after")
    def _extents_positive(self) -> SampleLayout:
        if not self.dims:
            raise ValueError("SampleLayout needs at least one axis")
        if any(d < 1 for d in self.dims):
            raise ValueError(f"SampleLayout extents must be >= 1, got {self.dims}")
        return self

    @classmethod
    def whc(cls, width: int, height: int, channels: int) -> SampleLayout:
        return cls(dims=(width, height, channels))

    @classmethod
    def vector(cls, length: int) -> SampleLayout:
        return cls(dims=(length,))

    @property
    def num_elements(self) -> int:
        """Total element count of one sample."""
        return math.prod(self.dims)


class SequenceData(TypedDict):
    """One materialized payload.

    data: Feature tensor of shape (H, W, C), or 1-D one-hot label tensor.
    layout: Shape of one sample in ``data``.
    number_of_samples: Samples represented by the sequence (1 for images).
    """

    data: torch.Tensor
    layout: SampleLayout
    number_of_samples: int


class SequencePair(TypedDict):
    """Feature and label payloads materialized for a single sequence id."""

    features: SequenceData
    labels: SequenceData
