"""Manifest-backed image sequence deserializer."""

from image_deserializer.config import (
    DeserializerConfig,
    EpochConfiguration,
    InputDescription,
)
from image_deserializer.data import (
    DataDeserializer,
    ImageDataDeserializer,
    SequenceDescription,
    Timeline,
    build_timeline,
)
from image_deserializer.errors import (
    ClassIdOutOfRangeError,
    ConfigurationError,
    DecodeError,
    DeserializerError,
    ManifestFormatError,
    SequenceIdError,
)
from image_deserializer.labels import LabelGenerator, create_label_generator
from image_deserializer.types import (
    ElementType,
    SampleLayout,
    SequenceData,
    SequencePair,
)

__version__ = "0.0.1"

__all__ = [
    "ClassIdOutOfRangeError",
    "ConfigurationError",
    "DataDeserializer",
    "DecodeError",
    "DeserializerConfig",
    "DeserializerError",
    "ElementType",
    "EpochConfiguration",
    "ImageDataDeserializer",
    "InputDescription",
    "LabelGenerator",
    "ManifestFormatError",
    "SampleLayout",
    "SequenceData",
    "SequenceDescription",
    "SequenceIdError",
    "SequencePair",
    "Timeline",
    "__version__",
    "build_timeline",
    "create_label_generator",
]
