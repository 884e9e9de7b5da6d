"""Path classification, translation, and location encoding."""

from .classifier import classify, find_source_profile
from .codec import decode_location, encode_location, extract_local_path, fully_decode
from .translator import Translation, TranslationStatus, translate, translate_detailed, translate_path

__all__ = [
    "classify",
    "find_source_profile",
    "decode_location",
    "encode_location",
    "extract_local_path",
    "fully_decode",
    "Translation",
    "TranslationStatus",
    "translate",
    "translate_detailed",
    "translate_path",
]
