"""Tests for fragment helpers and the rounded-rectangle lens."""

import dataclasses

import pytest
import torch

from liquidglass.core import (
    UV,
    TextureResult,
    RoundedRectLens,
    default_fragment,
    smooth_step,
    length,
    rounded_rect_sdf,
    texture,
)


class TestHelpers:
    def test_smooth_step_edges(self):
        assert smooth_step(0.0, 1.0, -1.0) == 0.0
        assert smooth_step(0.0, 1.0, 0.0) == 0.0
        assert smooth_step(0.0, 1.0, 0.5) == pytest.approx(0.5)
        assert smooth_step(0.0, 1.0, 1.0) == 1.0
        assert smooth_step(0.0, 1.0, 2.0) == 1.0

    def test_smooth_step_inverted(self):
        assert smooth_step(0.8, 0.0, 0.8) == 0.0
        assert smooth_step(0.8, 0.0, 0.0) == 1.0
        assert smooth_step(0.8, 0.0, -0.25) == 1.0
        assert smooth_step(0.8, 0.0, 0.4) == pytest.approx(0.5)

    def test_length(self):
        assert length(3.0, 4.0) == 5.0
        assert torch.equal(length(torch.tensor([3.0]), torch.tensor([4.0])), torch.tensor([5.0]))

    def test_sdf_inside_negative(self):
        assert rounded_rect_sdf(0.0, 0.0, 0.3, 0.2, 0.1) == pytest.approx(-0.2)

    def test_sdf_outside_positive(self):
        assert rounded_rect_sdf(1.0, 0.0, 0.3, 0.2, 0.1) == pytest.approx(0.7)
        assert rounded_rect_sdf(-1.0, 0.0, 0.3, 0.2, 0.1) == pytest.approx(0.7)

    def test_sdf_on_edge(self):
        assert rounded_rect_sdf(0.3, 0.0, 0.3, 0.2, 0.1) == pytest.approx(0.0, abs=1e-12)

    def test_sdf_rounded_corner(self):
        # Corner circle centred at (0.2, 0.1) with radius 0.1
        d = rounded_rect_sdf(0.5, 0.4, 0.3, 0.2, 0.1)
        assert d == pytest.approx(length(0.3, 0.3) - 0.1)

    def test_tensor_matches_float(self):
        xs = [-0.5, -0.31, -0.1, 0.0, 0.07, 0.25, 0.49]
        ys = [-0.5, -0.2, 0.0, 0.13, 0.33, 0.45, 0.5]
        tx = torch.tensor(xs, dtype=torch.float64)
        ty = torch.tensor(ys, dtype=torch.float64)

        d = rounded_rect_sdf(tx, ty, 0.3, 0.2, 0.6)
        s = smooth_step(0.8, 0.0, d - 0.15)

        for i, (x, y) in enumerate(zip(xs, ys)):
            df = rounded_rect_sdf(x, y, 0.3, 0.2, 0.6)
            assert d[i].item() == pytest.approx(df, abs=1e-15)
            assert s[i].item() == pytest.approx(smooth_step(0.8, 0.0, df - 0.15), abs=1e-15)

    def test_texture(self):
        t = texture(0.25, 0.75)
        assert isinstance(t, TextureResult)
        assert t.type == "t"
        assert (t.x, t.y) == (0.25, 0.75)


class TestRoundedRectLens:
    def test_center_is_fixed_point(self):
        t = default_fragment(UV(0.5, 0.5))
        assert (t.x, t.y) == (0.5, 0.5)

    def test_identity_near_center(self):
        t = default_fragment(UV(0.55, 0.45))
        assert t.x == pytest.approx(0.55)
        assert t.y == pytest.approx(0.45)

    def test_corner_pulled_inward(self):
        t = default_fragment(UV(0.0, 0.0))
        assert 0.0 < t.x < 0.5
        assert 0.0 < t.y < 0.5

        t = default_fragment(UV(0.99, 0.99))
        assert 0.5 < t.x < 0.99
        assert 0.5 < t.y < 0.99

    def test_symmetric(self):
        a = default_fragment(UV(0.1, 0.2))
        b = default_fragment(UV(0.9, 0.8))
        assert a.x - 0.5 == pytest.approx(-(b.x - 0.5))
        assert a.y - 0.5 == pytest.approx(-(b.y - 0.5))

    def test_tensor_input(self):
        uv = UV(torch.tensor([0.0, 0.5, 0.99], dtype=torch.float64),
                torch.tensor([0.0, 0.5, 0.99], dtype=torch.float64))
        t = default_fragment(uv)
        assert t.x.shape == (3,)
        for i, v in enumerate([0.0, 0.5, 0.99]):
            ref = default_fragment(UV(v, v))
            assert t.x[i].item() == pytest.approx(ref.x, abs=1e-15)
            assert t.y[i].item() == pytest.approx(ref.y, abs=1e-15)

    def test_custom_parameters(self):
        wide = RoundedRectLens(half_width=0.45, half_height=0.45, corner_radius=0.1)
        # A larger lens keeps more of the grid undistorted
        t_default = default_fragment(UV(0.05, 0.5))
        t_wide = wide(UV(0.05, 0.5))
        assert abs(t_wide.x - 0.05) < abs(t_default.x - 0.05)

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            default_fragment.half_width = 1.0
