"""crosspath - keep asset paths valid across computers and asset moves."""

__version__ = "0.3.0"

from .paths.classifier import classify
from .paths.codec import decode_location, encode_location
from .paths.translator import translate

__all__ = [
    "__version__",
    "classify",
    "translate",
    "encode_location",
    "decode_location",
]
