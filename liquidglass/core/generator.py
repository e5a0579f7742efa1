"""DisplacementMapGenerator: fragment -> RGBA displacement map + scale."""

import logging
import math
import numbers
from typing import Tuple, Optional

import numpy as np
import torch

from .shaders import UV, Fragment, default_fragment

logger = logging.getLogger(__name__)

# 0.5 * 255 rounded half to even
NEUTRAL_CHANNEL = 128

# Largest displacement (pixels) still treated as none; absorbs round-off
# such as (1 / 49) * 49 != 1 for identity fragments.
DEGENERATE_EPSILON = 1e-9


class InvalidDimensionError(ValueError):
    """Raised when a grid width or height is not a positive integer."""


def _check_dimension(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidDimensionError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidDimensionError(f"{name} must be positive, got {value}")
    return int(value)


def _target_xy(result) -> Tuple:
    if hasattr(result, "x") and hasattr(result, "y"):
        return result.x, result.y
    if isinstance(result, tuple) and len(result) == 2:
        return result
    raise ValueError(f"Fragment must return an object with x and y, got {type(result).__name__}")


def encode_displacements(raw: np.ndarray, max_abs: float) -> Tuple[np.ndarray, float]:
    """Pack raw pixel displacements into an RGBA byte buffer.

    Args:
        raw: [H, W, 2] float64 displacements (dx, dy) in pixels
        max_abs: largest |dx| or |dy| in ``raw``

    Returns:
        buffer: flat uint8 array of length H * W * 4
        scale: max_abs * 0.5
    """
    H, W = raw.shape[:2]
    if max_abs <= DEGENERATE_EPSILON:
        max_abs = 0.0
    scale = max_abs * 0.5

    pixels = np.empty((H, W, 4), dtype=np.uint8)
    if scale == 0:
        pixels[..., :2] = NEUTRAL_CHANNEL
    else:
        normalized = raw / scale + 0.5
        pixels[..., :2] = np.clip(np.rint(normalized * 255), 0, 255).astype(np.uint8)
    pixels[..., 2] = 0
    pixels[..., 3] = 255

    return pixels.reshape(-1), float(scale)


class DisplacementMapGenerator:
    """Two-pass displacement map generator.

    Pass 1 samples the fragment at every pixel and records its displacement;
    pass 2 normalizes by half the largest displacement and encodes R/G.
    """

    def __init__(self, vectorized: bool = False, device: str = "cpu"):
        self.vectorized = vectorized
        self.device = device

    def generate(
        self,
        fragment: Optional[Fragment],
        width: int,
        height: int,
    ) -> Tuple[np.ndarray, float]:
        """Render a displacement map.

        Args:
            fragment: pure UV -> TextureResult mapping (reference lens if None)
            width: grid width in pixels
            height: grid height in pixels

        Returns:
            buffer: uint8 [width * height * 4] RGBA, row-major, B=0, A=255
            scale: half the largest absolute displacement, in pixels
        """
        W = _check_dimension("width", width)
        H = _check_dimension("height", height)
        if fragment is None:
            fragment = default_fragment

        if self.vectorized:
            raw, max_abs = self._sample_grid(fragment, W, H)
        else:
            raw, max_abs = self._sample_pixels(fragment, W, H)

        buffer, scale = encode_displacements(raw, max_abs)
        logger.debug("Generated %dx%d displacement map, scale=%.6f", W, H, scale)
        return buffer, scale

    def _sample_pixels(self, fragment: Fragment, W: int, H: int) -> Tuple[np.ndarray, float]:
        raw = np.empty((H, W, 2), dtype=np.float64)
        max_abs = 0.0
        for y in range(H):
            for x in range(W):
                tx, ty = _target_xy(fragment(UV(x / W, y / H)))
                dx = float(tx) * W - x
                dy = float(ty) * H - y
                if not (math.isfinite(dx) and math.isfinite(dy)):
                    raise ValueError(f"Fragment produced a non-finite displacement at pixel ({x}, {y})")
                max_abs = max(max_abs, abs(dx), abs(dy))
                raw[y, x, 0] = dx
                raw[y, x, 1] = dy
        return raw, max_abs

    @torch.no_grad()
    def _sample_grid(self, fragment: Fragment, W: int, H: int) -> Tuple[np.ndarray, float]:
        device = torch.device(self.device)
        yg, xg = torch.meshgrid(
            torch.arange(H, device=device, dtype=torch.float64),
            torch.arange(W, device=device, dtype=torch.float64),
            indexing="ij",
        )
        tx, ty = _target_xy(fragment(UV(xg / W, yg / H)))
        tx = torch.as_tensor(tx, dtype=torch.float64, device=device).expand(H, W)
        ty = torch.as_tensor(ty, dtype=torch.float64, device=device).expand(H, W)

        disp = torch.stack([tx * W - xg, ty * H - yg], dim=-1)  # [H, W, 2]
        if not torch.isfinite(disp).all():
            raise ValueError("Fragment produced non-finite displacements")
        max_abs = disp.abs().max().item()
        return disp.cpu().numpy(), float(max_abs)


def generate_displacement_map(
    fragment: Optional[Fragment],
    width: int,
    height: int,
    vectorized: bool = False,
    device: str = "cpu",
) -> Tuple[np.ndarray, float]:
    """Render a displacement map with a one-off generator."""
    return DisplacementMapGenerator(vectorized=vectorized, device=device).generate(fragment, width, height)
