import io
import os
import random

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from webpress import app
from webpress.config import Settings, get_settings
from webpress.core.transcoder import AdaptiveTranscoder
from webpress.dependencies import get_transcoder


class FakeEncoder:
    """
    Encoder writing a fixed number of bytes per quality, recording each call.

    ``sizes`` maps a quality to the output size; qualities not listed use
    ``default``. A missing output before each write is recorded in
    ``overwrites`` so tests can check that discarded attempts were removed.
    """

    def __init__(self, sizes=None, default=4000):
        self.sizes = dict(sizes or {})
        self.default = default
        self.qualities = []
        self.overwrites = 0

    def __call__(self, image, target_path, quality):
        if os.path.exists(target_path):
            self.overwrites += 1
        self.qualities.append(quality)
        with open(target_path, "wb") as f:
            f.write(b"\0" * self.sizes.get(quality, self.default))


def noise_image(size=(64, 64), mode="RGB", seed=1234):
    rng = random.Random(seed)
    channels = len(mode)
    data = bytes(rng.getrandbits(8) for _ in range(size[0] * size[1] * channels))
    return Image.frombytes(mode, size, data)


def image_bytes(fmt="PNG", size=(64, 64), mode="RGB", seed=1234):
    buffer = io.BytesIO()
    noise_image(size, mode, seed).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def write_image(tmp_path):
    """Write a noise image to ``tmp_path`` and return its path."""
    def _write(name="source.png", fmt="PNG", size=(64, 64), mode="RGB"):
        path = tmp_path / name
        path.write_bytes(image_bytes(fmt, size, mode))
        return str(path)
    return _write


@pytest.fixture
def settings(tmp_path):
    return Settings(
        output_dir=str(tmp_path / "public"),
        upload_dir=str(tmp_path / "uploads"),
        archive_dir=str(tmp_path / "archives"),
        max_file_size=1024 * 1024,
        max_files=5
    )


@pytest.fixture
def fake_encoder():
    return FakeEncoder()


@pytest.fixture
def client(settings, fake_encoder):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_transcoder] = lambda: AdaptiveTranscoder(encoder=fake_encoder)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
