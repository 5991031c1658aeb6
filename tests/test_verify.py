"""Decoder round-trips: rendered codes must scan with ZBar and OpenCV."""

import pytest
from PIL import Image

pytest.importorskip("cv2")
# libzbar missing at runtime surfaces as a plain ImportError
pytest.importorskip("pyzbar.pyzbar", exc_type=ImportError)

from linkqr.config import RenderConfig  # noqa: E402
from linkqr.encode import from_data_uri  # noqa: E402
from linkqr.matrix import generate_plain_qr  # noqa: E402
from linkqr.pipeline import generate_profile_qr, render_styled_qr  # noqa: E402
from linkqr.verify import scan_pyzbar, verify  # noqa: E402

URL = "https://example.com/profile/alice"


def _decodes_to(image, expected):
    results = verify(image, expected_data=expected)
    assert any(r.success for r in results), [r.error for r in results]


def test_plain_qr_scans():
    _decodes_to(generate_plain_qr(URL), URL)


def test_default_profile_qr_scans(config):
    uri = generate_profile_qr("alice", "https://example.com", config=config)
    _decodes_to(from_data_uri(uri), URL)


def test_default_profile_qr_with_logo_scans(config, red_logo):
    uri = generate_profile_qr("alice", "https://example.com", config=config, logo=red_logo)
    _decodes_to(from_data_uri(uri), URL)


def test_configured_logo_file_scans(logo_file):
    image = render_styled_qr(URL, config=RenderConfig(logo_paths=(str(logo_file),)))
    _decodes_to(image, URL)


def test_mismatch_is_reported_as_failure():
    results = verify(generate_plain_qr(URL), expected_data="https://example.com/profile/bob")
    assert not any(r.success for r in results)
    assert all("mismatch" in r.error for r in results if r.decoded_data)


def test_blank_image_has_no_code():
    result = scan_pyzbar(Image.new("RGB", (200, 200), "white"))
    assert not result.success
    assert result.decoder == "pyzbar/zbar"
