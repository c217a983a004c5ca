"""Tests for the adaptive WebP quality search."""

import os

import pytest
from PIL import Image

from conftest import FakeEncoder, noise_image
from webpress.core.transcoder import (
    AdaptiveTranscoder,
    SearchState,
    Transition,
    load_image,
    transcode,
)
from webpress.exceptions import EncodeError, TooSmallOutputError


def run_search(encoder, tmp_path, original_size, source_is_webp=False):
    target = str(tmp_path / "out.webp")
    result = AdaptiveTranscoder(encoder=encoder).search(
        noise_image(), target, original_size, source_is_webp
    )
    return result, target


def test_first_attempt_smaller_is_kept(tmp_path):
    encoder = FakeEncoder({70: 400_000})
    result, target = run_search(encoder, tmp_path, 1_000_000)

    assert result.converted_size == 400_000
    assert result.quality == 70
    assert result.encodes == 1
    assert encoder.qualities == [70]
    assert os.path.getsize(target) == 400_000
    assert not result.used_fallback


def test_webp_source_starts_at_lower_quality(tmp_path):
    encoder = FakeEncoder(default=1000)
    result, _ = run_search(encoder, tmp_path, 2000, source_is_webp=True)

    assert encoder.qualities == [50]
    assert result.converted_size == 1000


def test_steps_down_until_smaller(tmp_path):
    encoder = FakeEncoder({70: 5000, 50: 4000, 30: 2500})
    result, target = run_search(encoder, tmp_path, 3000)

    assert encoder.qualities == [70, 50, 30]
    assert result.converted_size == 2500
    assert result.quality == 30
    assert os.path.getsize(target) == 2500


def test_webp_without_reduction_falls_back(tmp_path):
    encoder = FakeEncoder(default=2500)
    result, target = run_search(encoder, tmp_path, 2000, source_is_webp=True)

    assert encoder.qualities == [50, 30, 10, 20]
    assert result.used_fallback
    assert result.quality == 20
    assert result.converted_size == 2500
    assert os.path.exists(target)
    assert [t.state for t in result.transitions] == [
        SearchState.SEARCHING,
        SearchState.SEARCHING,
        SearchState.SEARCHING,
        SearchState.FALLBACK,
        SearchState.DONE,
    ]


def test_exhausted_search_falls_back(tmp_path):
    encoder = FakeEncoder({20: 1500}, default=9000)
    result, _ = run_search(encoder, tmp_path, 8000)

    assert encoder.qualities == [70, 50, 30, 20]
    assert result.encodes == 4
    assert result.converted_size == 1500
    assert result.transitions[-2] == Transition(SearchState.FALLBACK, 20, 3, 1500)


def test_discarded_attempts_are_removed_before_next(tmp_path):
    encoder = FakeEncoder(default=9000)
    run_search(encoder, tmp_path, 8000)

    assert len(encoder.qualities) == 4
    assert encoder.overwrites == 0


def test_too_small_output_fails_and_removes_file(tmp_path):
    encoder = FakeEncoder({70: 300})
    target = str(tmp_path / "out.webp")

    with pytest.raises(TooSmallOutputError) as excinfo:
        AdaptiveTranscoder(encoder=encoder).search(noise_image(), target, 1000, False)

    assert "too small" in excinfo.value.message
    assert excinfo.value.details["size"] == 300
    assert not os.path.exists(target)


def test_small_fallback_output_is_accepted(tmp_path):
    encoder = FakeEncoder({20: 400}, default=9000)
    target = str(tmp_path / "out.webp")

    result = AdaptiveTranscoder(encoder=encoder).search(noise_image(), target, 1000, False)

    assert result.used_fallback
    assert result.converted_size == 400
    assert os.path.getsize(target) == 400


def test_search_is_repeatable(tmp_path):
    first, _ = run_search(FakeEncoder(default=2500), tmp_path, 2000, source_is_webp=True)
    second, _ = run_search(FakeEncoder(default=2500), tmp_path, 2000, source_is_webp=True)

    assert first.transitions == second.transitions
    assert first.converted_size == second.converted_size


def test_encoder_failure_is_not_retried(tmp_path):
    calls = []

    def broken(image, target_path, quality):
        calls.append(quality)
        with open(target_path, "wb") as f:
            f.write(b"partial")
        raise OSError("encoder error -2")

    target = str(tmp_path / "out.webp")
    with pytest.raises(EncodeError) as excinfo:
        AdaptiveTranscoder(encoder=broken).search(noise_image(), target, 1000, False)

    assert calls == [70]
    assert "quality 70" in excinfo.value.message
    assert not os.path.exists(target)


def test_load_image_rejects_garbage(tmp_path):
    path = tmp_path / "fake.png"
    path.write_bytes(b"this is not an image")

    with pytest.raises(EncodeError) as excinfo:
        load_image(str(path))
    assert str(tmp_path) not in excinfo.value.message


def test_load_image_keeps_palette_transparency(tmp_path):
    image = Image.new("P", (16, 16), 0)
    image.info["transparency"] = 0
    path = tmp_path / "palette.gif"
    image.save(path, format="GIF", transparency=0)

    loaded = load_image(str(path))
    assert loaded.mode == "RGBA"


def test_load_image_converts_greyscale(tmp_path):
    path = tmp_path / "grey.png"
    Image.new("L", (16, 16), 128).save(path)

    assert load_image(str(path)).mode == "RGB"


def test_transcode_real_webp_encode(tmp_path, write_image):
    source = write_image("noise.png", size=(256, 256))
    original_size = os.path.getsize(source)
    target = str(tmp_path / "noise.webp")

    size = transcode(source, target, original_size, False)

    assert size == os.path.getsize(target)
    assert size < original_size
    with Image.open(target) as converted:
        assert converted.format == "WEBP"
        assert converted.size == (256, 256)
