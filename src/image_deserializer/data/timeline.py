"""Sequence timeline built from a tab-delimited image manifest."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from pathlib import Path

from loguru import logger
from pydantic import BaseModel

from image_deserializer.config import ChunkingPolicy
from image_deserializer.errors import (
    ClassIdOutOfRangeError,
    ConfigurationError,
    ManifestFormatError,
    SequenceIdError,
)


class SequenceDescription(BaseModel, frozen=True):
    """One manifest row resolved to an addressable sequence."""

    id: int
    chunk_id: int
    path: str
    class_id: int
    number_of_samples: int = 1
    is_valid: bool = True


class Timeline(Sequence[SequenceDescription]):
    """Immutable, id-ordered catalog of sequence descriptions.

    ``timeline[i].id == i`` for every position. Negative indexing is not
    supported: ids are dense and start at zero.
    """

    def __init__(self, descriptions: Sequence[SequenceDescription]) -> None:
        self._descriptions = tuple(descriptions)
        chunks: dict[int, list[int]] = {}
        for description in self._descriptions:
            chunks.setdefault(description.chunk_id, []).append(description.id)
        self._chunks = {k: tuple(v) for k, v in chunks.items()}

    def __len__(self) -> int:
        return len(self._descriptions)

    def __getitem__(self, sequence_id: int) -> SequenceDescription:  # type: ignore[override]
        return self.lookup(sequence_id)

    def __iter__(self) -> Iterator[SequenceDescription]:
        return iter(self._descriptions)

    def lookup(self, sequence_id: int) -> SequenceDescription:
        """Return the description for ``sequence_id``.

        Raises:
            SequenceIdError: If the id is not in ``[0, len(self))``.
        """
        if not 0 <= sequence_id < len(self._descriptions):
            raise SequenceIdError(sequence_id, len(self._descriptions))
        return self._descriptions[sequence_id]

    @property
    def chunk_ids(self) -> list[int]:
        """Sorted unique chunk ids present in the timeline."""
        return sorted(self._chunks)

    def sequences_in_chunk(self, chunk_id: int) -> tuple[int, ...]:
        """Ids of the sequences grouped under ``chunk_id`` (empty if unknown)."""
        return self._chunks.get(chunk_id, ())

    def __repr__(self) -> str:
        return f"Timeline(sequences={len(self)}, chunks={len(self._chunks)})"


def _parse_class_id(text: str, map_path: Path, line_no: int) -> int:
    if not text.isdecimal() or not text.isascii():
        raise ManifestFormatError(
            f"Class id must be a non-negative base-10 integer, got {text!r}",
            map_path,
            line_no,
        )
    try:
        return int(text)
    except ValueError as e:
        # Digit strings past the int conversion limit
        raise ManifestFormatError(
            f"Class id is not a valid integer: {e}", map_path, line_no
        ) from e


def build_timeline(
    map_path: str | Path,
    label_dimension: int,
    chunking: ChunkingPolicy = "sequence",
) -> Timeline:
    """Read a manifest of ``<path>\\t<classId>`` rows into a Timeline.

    Each row becomes one single-sample sequence whose id is its 0-based line
    number. The load is all-or-nothing: the first malformed row aborts it.
    The manifest must be UTF-8; a row that does not decode is a format error.

    Args:
        map_path: Manifest file to read.
        label_dimension: Exclusive upper bound for class ids.
        chunking: ``"sequence"`` for one chunk per sequence, ``"dataset"``
            for a single chunk holding everything.

    Raises:
        ConfigurationError: If the manifest cannot be opened.
        ManifestFormatError: If a row is not UTF-8, does not hold exactly two
            tab-delimited fields or its class id is not a non-negative integer.
        ClassIdOutOfRangeError: If a class id is ``>= label_dimension``.
    """
    map_path = Path(map_path)
    descriptions: list[SequenceDescription] = []
    try:
        f = open(map_path, "rb")
    except OSError as e:
        raise ConfigurationError(f"Could not open {map_path} for reading: {e}") from e

    with f:
        for line_no, raw in enumerate(f):
            try:
                line = raw.rstrip(b"\r\n").decode("utf-8")
            except UnicodeDecodeError as e:
                raise ManifestFormatError(
                    f"Row is not valid UTF-8: {e}", map_path, line_no
                ) from e
            fields = line.split("\t")
            if len(fields) != 2:
                raise ManifestFormatError(
                    "Invalid map file format, must contain 2 tab-delimited columns",
                    map_path,
                    line_no,
                )
            img_path, cls_text = fields
            class_id = _parse_class_id(cls_text, map_path, line_no)
            if class_id >= label_dimension:
                raise ClassIdOutOfRangeError(
                    class_id, label_dimension, map_path, line_no
                )
            descriptions.append(
                SequenceDescription(
                    id=line_no,
                    chunk_id=line_no if chunking == "sequence" else 0,
                    path=img_path,
                    class_id=class_id,
                )
            )

    timeline = Timeline(descriptions)
    logger.info(
        f"Loaded {len(timeline)} sequence(s) in {len(timeline.chunk_ids)} chunk(s) "
        f"from {map_path}"
    )
    return timeline
