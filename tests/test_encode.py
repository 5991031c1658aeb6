"""Data-URI encoder: prefix validation and hard failures."""

import pytest
from PIL import Image

from linkqr.encode import DATA_URI_PREFIX, from_data_uri, to_data_uri, validate_data_uri
from linkqr.errors import EncodingError


def test_png_data_uri_prefix():
    uri = to_data_uri(Image.new("RGB", (8, 8), (10, 20, 30)))
    assert uri.startswith(DATA_URI_PREFIX)
    assert len(uri) > len(DATA_URI_PREFIX)


def test_data_uri_decodes_back_to_the_same_pixels():
    img = Image.new("RGB", (8, 8), (10, 20, 30))
    decoded = from_data_uri(to_data_uri(img))
    assert decoded.size == (8, 8)
    assert decoded.convert("RGB").getpixel((3, 3)) == (10, 20, 30)


@pytest.mark.parametrize("bad", ["", None, "data:text/plain;base64,aGk=", DATA_URI_PREFIX])
def test_malformed_data_uris_are_rejected(bad):
    with pytest.raises(EncodingError):
        validate_data_uri(bad)


def test_save_failure_is_an_encoding_error():
    class Unsaveable:
        def save(self, fp, format=None):
            raise OSError("disk full")

    with pytest.raises(EncodingError):
        to_data_uri(Unsaveable())


def test_undecodable_payload_is_an_encoding_error():
    with pytest.raises(EncodingError):
        from_data_uri(DATA_URI_PREFIX + "bm90IGEgcG5n")
