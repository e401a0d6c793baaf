"""Exception taxonomy for image_deserializer.

Configuration, manifest-format and decode failures are fatal for the
operation that detects them. Nothing here is retried.
"""

from __future__ import annotations

from pathlib import Path


class DeserializerError(Exception):
    """Base class for all errors raised by image_deserializer."""


class ConfigurationError(DeserializerError, ValueError):
    """The deserializer cannot be built from the given configuration."""


class ManifestFormatError(DeserializerError, ValueError):
    """A manifest row could not be parsed.

    Attributes:
        path: Manifest file the row came from.
        line: 0-based line number of the offending row.
    """

    def __init__(self, message: str, path: Path | None, line: int | None) -> None:
        self.path = path
        self.line = line
        if path is not None and line is not None:
            message = f"{message} ({path}, line: {line})"
        super().__init__(message)


class ClassIdOutOfRangeError(ManifestFormatError):
    """A class id falls outside ``[0, dimension)``."""

    def __init__(
        self,
        class_id: int,
        dimension: int,
        path: Path | None = None,
        line: int | None = None,
    ) -> None:
        self.class_id = class_id
        self.dimension = dimension
        super().__init__(
            f"Class id {class_id} is out of range for label dimension {dimension}",
            path,
            line,
        )


class SequenceIdError(DeserializerError, IndexError):
    """A sequence id is not present in the timeline."""

    def __init__(self, sequence_id: int, size: int) -> None:
        self.sequence_id = sequence_id
        self.size = size
        super().__init__(
            f"Sequence id {sequence_id} is out of range for a timeline of {size} "
            f"sequence(s)"
        )


class DecodeError(DeserializerError, RuntimeError):
    """A feature source could not be decoded into a payload."""

    def __init__(
        self, path: str | Path, reason: str, sequence_id: int | None = None
    ) -> None:
        self.path = str(path)
        self.sequence_id = sequence_id
        where = f"sequence {sequence_id}, " if sequence_id is not None else ""
        super().__init__(f"Could not decode image ({where}{self.path}): {reason}")
