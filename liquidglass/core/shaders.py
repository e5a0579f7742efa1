"""Fragment functions and SDF helpers.

Every helper accepts Python floats or ``torch.Tensor`` grids, so a fragment
written with them can be sampled one pixel at a time or over a whole grid.
"""

import math
from dataclasses import dataclass
from typing import Callable, NamedTuple, Union

import torch

Scalar = Union[float, torch.Tensor]


class UV(NamedTuple):
    """Normalized sample coordinate in [0, 1) x [0, 1)."""
    x: Scalar
    y: Scalar


class TextureResult(NamedTuple):
    """Normalized coordinate a fragment samples from."""
    type: str
    x: Scalar
    y: Scalar


Fragment = Callable[[UV], TextureResult]


def _minimum(a: Scalar, b: Scalar) -> Scalar:
    if isinstance(a, torch.Tensor) and isinstance(b, torch.Tensor):
        return torch.minimum(a, b)
    if isinstance(a, torch.Tensor):
        return a.clamp(max=b)
    if isinstance(b, torch.Tensor):
        return b.clamp(max=a)
    return min(a, b)


def _maximum(a: Scalar, b: Scalar) -> Scalar:
    if isinstance(a, torch.Tensor) and isinstance(b, torch.Tensor):
        return torch.maximum(a, b)
    if isinstance(a, torch.Tensor):
        return a.clamp(min=b)
    if isinstance(b, torch.Tensor):
        return b.clamp(min=a)
    return max(a, b)


def smooth_step(a: float, b: float, t: Scalar) -> Scalar:
    """Cubic Hermite ease of ``t`` between edges ``a`` and ``b``.

    ``a`` may be greater than ``b``, which inverts the ramp.
    """
    t = _maximum(0.0, _minimum(1.0, (t - a) / (b - a)))
    return t * t * (3 - 2 * t)


def length(x: Scalar, y: Scalar) -> Scalar:
    if isinstance(x, torch.Tensor) or isinstance(y, torch.Tensor):
        return torch.sqrt(x * x + y * y)
    return math.sqrt(x * x + y * y)


def rounded_rect_sdf(x: Scalar, y: Scalar, width: float, height: float, radius: float) -> Scalar:
    """Signed distance from (x, y) to a rounded rectangle centred at the origin.

    ``width``/``height`` are half extents. Negative inside, positive outside.
    """
    qx = abs(x) - width + radius
    qy = abs(y) - height + radius
    return _minimum(_maximum(qx, qy), 0.0) + length(_maximum(qx, 0.0), _maximum(qy, 0.0)) - radius


def texture(x: Scalar, y: Scalar) -> TextureResult:
    return TextureResult("t", x, y)


@dataclass(frozen=True)
class RoundedRectLens:
    """Liquid glass lens: identity near the centre, pulls samples inward
    as the rounded-rectangle distance grows.
    """
    half_width: float = 0.3
    half_height: float = 0.2
    corner_radius: float = 0.6
    edge_offset: float = 0.15
    falloff: float = 0.8

    def __call__(self, uv: UV) -> TextureResult:
        ix = uv.x - 0.5
        iy = uv.y - 0.5
        distance_to_edge = rounded_rect_sdf(ix, iy, self.half_width, self.half_height, self.corner_radius)
        displacement = smooth_step(self.falloff, 0.0, distance_to_edge - self.edge_offset)
        scaled = smooth_step(0.0, 1.0, displacement)
        return texture(ix * scaled + 0.5, iy * scaled + 0.5)


default_fragment = RoundedRectLens()
