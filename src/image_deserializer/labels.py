"""One-hot label generators specialized per element type.

The element type is inspected once, when the generator is created; every
later ``generate`` call goes through the uniform :class:`LabelGenerator`
interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import torch

from image_deserializer.errors import ClassIdOutOfRangeError, ConfigurationError
from image_deserializer.types import ElementType

SUPPORTED_LABEL_TYPES: tuple[ElementType, ...] = (
    ElementType.FLOAT32,
    ElementType.FLOAT64,
)


class LabelGenerator(ABC):
    """Produces one-hot label buffers for class ids."""

    dimension: int
    element_type: ElementType

    @abstractmethod
    def generate(self, class_id: int) -> torch.Tensor:
        """Return the one-hot encoding of ``class_id``.

        The returned tensor is owned by the generator and is overwritten by
        the next call. Callers that need to keep it must clone it.
        """


class TypedLabelGenerator(LabelGenerator):
    """Label generator writing into a single reusable buffer.

    Not safe to share between threads; create one generator per worker.

    Args:
        dimension: Length of the label vector.
        element_type: Numeric representation of the buffer.
    """

    def __init__(self, dimension: int, element_type: ElementType) -> None:
        self.dimension = dimension
        self.element_type = element_type
        self._buffer = torch.zeros(dimension, dtype=element_type.torch_dtype)

    def generate(self, class_id: int) -> torch.Tensor:
        if not 0 <= class_id < self.dimension:
            raise ClassIdOutOfRangeError(class_id, self.dimension)
        self._buffer.zero_()
        self._buffer[class_id] = 1
        return self._buffer

    def __repr__(self) -> str:
        return (
            f"TypedLabelGenerator(dimension={self.dimension}, "
            f"element_type='{self.element_type.value}')"
        )


def create_label_generator(
    element_type: ElementType, dimension: int
) -> LabelGenerator:
    """Factory: pick the label generator for the label stream's element type.

    Raises:
        ConfigurationError: If the element type is not a supported label
            representation or the dimension is not positive.
    """
    if element_type not in SUPPORTED_LABEL_TYPES:
        raise ConfigurationError(
            f"Unsupported label element type '{ElementType(element_type).value}'"
        )
    if dimension < 1:
        raise ConfigurationError(f"Label dimension must be >= 1, got {dimension}")
    return TypedLabelGenerator(dimension, element_type)
