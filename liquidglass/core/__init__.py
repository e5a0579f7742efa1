"""LiquidGlass Core: displacement map generation."""

from .config import LensConfig, MapConfig
from .shaders import (
    UV,
    TextureResult,
    RoundedRectLens,
    default_fragment,
    smooth_step,
    length,
    rounded_rect_sdf,
    texture,
)
from .generator import (
    DisplacementMapGenerator,
    InvalidDimensionError,
    NEUTRAL_CHANNEL,
    encode_displacements,
    generate_displacement_map,
)

__all__ = [
    "LensConfig",
    "MapConfig",
    "UV",
    "TextureResult",
    "RoundedRectLens",
    "default_fragment",
    "smooth_step",
    "length",
    "rounded_rect_sdf",
    "texture",
    "DisplacementMapGenerator",
    "InvalidDimensionError",
    "NEUTRAL_CHANNEL",
    "encode_displacements",
    "generate_displacement_map",
]
