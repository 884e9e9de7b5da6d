import logging

import pytest

from crosspath.errors import MalformedIdentifier
from crosspath.paths.codec import (
    decode_location,
    decode_once,
    encode_location,
    extract_local_path,
    fully_decode,
    is_windows_path,
)


def test_decode_windows_identifier() -> None:
    assert decode_location("file:///C%3A/Users/alice/img/cat.png") == "C:/Users/alice/img/cat.png"
    assert decode_location("file:///C:/Users/alice/img/cat.png") == "C:/Users/alice/img/cat.png"


def test_decode_mac_identifier() -> None:
    assert decode_location("file:///Users/alice/My%20Pics/cat.png") == "/Users/alice/My Pics/cat.png"


def test_decode_unwinds_double_encoding() -> None:
    assert decode_location("file:///Users/alice/My%2520Pics/cat.png") == "/Users/alice/My Pics/cat.png"


def test_decode_restores_missing_leading_slash() -> None:
    assert decode_location("file://Users/alice/cat.png") == "/Users/alice/cat.png"
    assert decode_location("Users/alice/cat.png") == "/Users/alice/cat.png"


def test_decode_render_url() -> None:
    assert decode_location("app://local/Users/alice/cat.png") == "/Users/alice/cat.png"
    assert decode_location("app://3f9a/C:/Users/alice/cat.png") == "C:/Users/alice/cat.png"


def test_remote_identifiers_are_not_local() -> None:
    assert extract_local_path("https://example.com/cat.png") is None
    assert extract_local_path("eagle://item/ABC123") is None
    assert decode_location("https://example.com/cat.png") == "https://example.com/cat.png"


def test_malformed_escape_keeps_last_good_decode(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="crosspath.paths.codec"):
        assert fully_decode("/Users/alice/bad%C3.png") == "/Users/alice/bad%C3.png"
        assert fully_decode("/Users/alice/a%2520b%25C3.png") == "/Users/alice/a%20b%C3.png"
    assert "Undecodable escape" in caplog.text


def test_decode_once_raises_on_invalid_utf8() -> None:
    with pytest.raises(MalformedIdentifier):
        decode_once("%C3")


def test_encode_windows_path_keeps_drive_colon() -> None:
    encoded = encode_location("C:/Users/alice/img/cat.png")
    assert encoded == "file:///C:/Users/alice/img/cat.png"
    assert "%3A" not in encoded


def test_encode_backslashes_and_spaces() -> None:
    assert encode_location(r"C:\Users\alice\My Pics\cat.png") == "file:///C:/Users/alice/My%20Pics/cat.png"


def test_encode_posix_path() -> None:
    encoded = encode_location("/Users/alice/My Pics/cat (1).png")
    assert encoded == "file:///Users/alice/My%20Pics/cat%20(1).png"
    assert not encoded.startswith("file:////")


def test_encode_then_decode_preserves_unusual_names() -> None:
    for path in ("/Users/alice/Bilder/Käse #1.png", "C:/Users/alice/100% done/a&b.png"):
        assert decode_location(encode_location(path)) == path


def test_is_windows_path() -> None:
    assert is_windows_path("C:/Users/alice")
    assert is_windows_path(r"c:\Users\alice")
    assert not is_windows_path("/Users/alice")
