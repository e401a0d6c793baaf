"""Timeline construction, image decoding and sequence materialization."""

from image_deserializer.data.decoding import (
    DecodedImage,
    ImageDecoder,
    PILImageDecoder,
)
from image_deserializer.data.deserializer import (
    DataDeserializer,
    ImageDataDeserializer,
)
from image_deserializer.data.timeline import (
    SequenceDescription,
    Timeline,
    build_timeline,
)

__all__ = [
    "DataDeserializer",
    "DecodedImage",
    "ImageDataDeserializer",
    "ImageDecoder",
    "PILImageDecoder",
    "SequenceDescription",
    "Timeline",
    "build_timeline",
]
