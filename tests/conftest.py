"""Shared fixtures for the linkqr test suite."""

import pytest
from PIL import Image

from linkqr.config import RenderConfig
from linkqr.matrix import encode_matrix
from linkqr.profiles import ProfileStore

PROFILE_URL = "https://example.com/profile/alice"


class SpyEncoder:
    """Matrix producer that records its calls and can be told to fail."""

    def __init__(self, fail_with: Exception | None = None):
        self.calls = []
        self.fail_with = fail_with

    def __call__(self, text, ecc):
        self.calls.append((text, ecc))
        if self.fail_with is not None:
            raise self.fail_with
        return encode_matrix(text, ecc)


@pytest.fixture
def config():
    """Default render settings with no logo candidates on disk."""
    return RenderConfig(logo_paths=())


@pytest.fixture
def spy_encoder():
    return SpyEncoder()


@pytest.fixture
def red_logo():
    return Image.new("RGBA", (90, 90), (220, 20, 60, 255))


@pytest.fixture
def logo_file(tmp_path, red_logo):
    path = tmp_path / "logo.png"
    red_logo.save(path)
    return path


@pytest.fixture
def broken_logo_file(tmp_path):
    path = tmp_path / "broken.png"
    path.write_text("definitely not a png")
    return path


@pytest.fixture
def store(tmp_path):
    return ProfileStore(str(tmp_path / "profiles.json"))
