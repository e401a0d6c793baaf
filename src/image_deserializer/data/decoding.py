"""Image decoders turning a source path into a pixel tensor."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import NamedTuple

import numpy as np
import torch
from PIL import Image

from image_deserializer.errors import DecodeError


class DecodedImage(NamedTuple):
    """Decoded pixels plus their extents.

    ``pixels`` has shape ``(height, width, channels)``.
    """

    width: int
    height: int
    channels: int
    pixels: torch.Tensor


class ImageDecoder(ABC):
    """Decodes an image source into a dense pixel tensor."""

    @abstractmethod
    def decode(self, path: str | Path) -> DecodedImage:
        """Decode ``path``.

        Raises:
            DecodeError: If the source is missing, unreadable or corrupt.
        """


class PILImageDecoder(ImageDecoder):
    """Decode images with PIL.

    Args:
        mode: PIL mode to convert to (``"RGB"`` gives three channels).
            ``None`` keeps the file's own mode, so grayscale sources decode
            to one channel and RGBA sources to four.
    """

    def __init__(self, mode: str | None = "RGB") -> None:
        self.mode = mode

    def decode(self, path: str | Path) -> DecodedImage:
        try:
            with Image.open(path) as img:
                if self.mode is not None and img.mode != self.mode:
                    img = img.convert(self.mode)
                array = np.array(img)
        except (OSError, ValueError) as e:
            raise DecodeError(path, str(e)) from e

        if array.ndim == 2:
            array = array[:, :, np.newaxis]
        height, width, channels = array.shape
        return DecodedImage(
            width=width,
            height=height,
            channels=channels,
            pixels=torch.from_numpy(np.ascontiguousarray(array)),
        )

    def __repr__(self) -> str:
        return f"PILImageDecoder(mode={self.mode!r})"
