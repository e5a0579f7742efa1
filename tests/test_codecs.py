"""Tests for DisplacementMapCodec."""

import base64
import io
from unittest import mock

import pytest
import numpy as np
import tempfile
from pathlib import Path
from PIL import Image

from liquidglass.core import DisplacementMapGenerator, default_fragment
from liquidglass.codecs import DisplacementMapCodec


class TestDisplacementMapCodec:
    @pytest.fixture
    def sample_map(self):
        W, H = 24, 16
        buffer, scale = DisplacementMapGenerator().generate(default_fragment, W, H)
        return {"buffer": buffer, "width": W, "height": H, "scale": scale}

    def test_to_image(self, sample_map):
        img = DisplacementMapCodec.to_image(sample_map["buffer"], sample_map["width"], sample_map["height"])

        assert img.mode == "RGBA"
        assert img.size == (24, 16)

    def test_png_is_lossless(self, sample_map):
        png = DisplacementMapCodec.to_png_bytes(sample_map["buffer"], sample_map["width"], sample_map["height"])
        buffer, width, height = DisplacementMapCodec.from_image(Image.open(io.BytesIO(png)))

        assert (width, height) == (24, 16)
        assert np.array_equal(buffer, sample_map["buffer"])

    def test_from_image_path_closes_file(self, sample_map):
        opened = []
        real_open = Image.open

        def tracking_open(*args, **kwargs):
            img = real_open(*args, **kwargs)
            handle = mock.MagicMock(wraps=img)
            handle.__enter__.return_value = img
            handle.__exit__.side_effect = img.__exit__
            opened.append(handle)
            return handle

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "map.png"
            DisplacementMapCodec.to_image(sample_map["buffer"], 24, 16).save(path)

            with mock.patch.object(Image, "open", side_effect=tracking_open):
                buffer, width, height = DisplacementMapCodec.from_image(path)

            assert (width, height) == (24, 16)
            assert np.array_equal(buffer, sample_map["buffer"])
            assert len(opened) == 1
            assert opened[0].__exit__.called

    def test_data_url(self, sample_map):
        url = DisplacementMapCodec.to_data_url(sample_map["buffer"], sample_map["width"], sample_map["height"])

        prefix = "data:image/png;base64,"
        assert url.startswith(prefix)
        png = base64.b64decode(url[len(prefix):])
        assert png.startswith(b"\x89PNG")

    def test_displacements(self):
        # R encodes dx = +0.25, -0.25, 0 at scale 1
        buffer = np.array([
            191, 128, 0, 255,
            64, 128, 0, 255,
            128, 128, 0, 255,
        ], dtype=np.uint8)

        disp = DisplacementMapCodec.displacements(buffer, 3, 1, scale=1.0)

        assert disp.shape == (1, 3, 2)
        assert disp.dtype == np.float32
        assert np.allclose(disp[0, :, 0], [0.25, -0.25, 0.0], atol=1.0 / 255)
        assert np.allclose(disp[0, :, 1], 0.0, atol=1.0 / 255)

    def test_bad_buffer_length(self, sample_map):
        with pytest.raises(ValueError):
            DisplacementMapCodec.to_image(sample_map["buffer"][:-1], 24, 16)
        with pytest.raises(ValueError):
            DisplacementMapCodec.encode(sample_map["buffer"], 10, 10, 1.0)

    def test_encode_decode(self, sample_map):
        encoded = DisplacementMapCodec.encode(meta={"name": "lens"}, **sample_map)
        decoded = DisplacementMapCodec.decode(encoded)

        assert encoded["pixels"].shape == (16, 24, 4)
        assert np.array_equal(decoded["buffer"], sample_map["buffer"])
        assert decoded["scale"] == sample_map["scale"]
        assert decoded["meta"]["name"] == "lens"

    def test_save_load(self, sample_map):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "map.npy"

            DisplacementMapCodec.save(path, meta={"filter_scale": 1.5}, **sample_map)
            loaded = DisplacementMapCodec.load(path)

            assert np.array_equal(loaded["buffer"], sample_map["buffer"])
            assert loaded["width"] == 24
            assert loaded["height"] == 16
            assert loaded["scale"] == pytest.approx(sample_map["scale"])
            assert loaded["meta"]["filter_scale"] == 1.5

    def test_version(self, sample_map):
        encoded = DisplacementMapCodec.encode(**sample_map)
        assert encoded["version"] == DisplacementMapCodec.VERSION
