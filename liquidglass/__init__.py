"""LiquidGlass: displacement maps for liquid glass lens effects.

Main components:
- core: Fragment functions and the displacement map generator
- codecs: PNG / data URL / .npy encoding of generated maps
- generators: YAML-driven batch rendering
"""

from .core import (
    LensConfig,
    MapConfig,
    UV,
    TextureResult,
    RoundedRectLens,
    default_fragment,
    smooth_step,
    length,
    rounded_rect_sdf,
    texture,
    DisplacementMapGenerator,
    InvalidDimensionError,
    NEUTRAL_CHANNEL,
    generate_displacement_map,
)
from .codecs import DisplacementMapCodec
from .generators import MapSetGenerator

__version__ = "0.1.0"
__all__ = [
    # Core
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
    "generate_displacement_map",
    # Codecs
    "DisplacementMapCodec",
    # Generators
    "MapSetGenerator",
]
