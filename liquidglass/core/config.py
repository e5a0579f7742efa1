"""Displacement map configuration."""

import numbers
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Tuple, Dict, Any, Union

import yaml

from .shaders import RoundedRectLens


def _as_int(name: str, value) -> int:
    """Parse an integer field, rejecting values that would be truncated."""
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
    raise ValueError(f"{name} must be an integer, got {value!r}")


@dataclass
class LensConfig:
    """Parameters of the rounded-rectangle lens fragment."""
    half_width: float = 0.3
    half_height: float = 0.2
    corner_radius: float = 0.6
    edge_offset: float = 0.15  # shifts the SDF before the falloff ramp
    falloff: float = 0.8  # SDF distance at which the lens fully compresses

    def __post_init__(self):
        if self.falloff == 0:
            raise ValueError("falloff must be non-zero")

    def build(self) -> RoundedRectLens:
        return RoundedRectLens(**asdict(self))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LensConfig":
        valid_keys = {f.name for f in fields(cls)}
        return cls(**{k: float(v) for k, v in d.items() if k in valid_keys})


@dataclass
class MapConfig:
    """Configuration for rendering one displacement map.

    ``width``/``height`` are in CSS pixels; the sampled grid is multiplied by
    ``canvas_dpi`` and the filter scale is divided by it.
    """
    name: str = "liquid_glass"
    width: int = 300
    height: int = 200
    canvas_dpi: int = 1
    vectorized: bool = False
    device: str = "cpu"
    lens: LensConfig = field(default_factory=LensConfig)

    def __post_init__(self):
        if self.canvas_dpi <= 0:
            raise ValueError(f"canvas_dpi must be positive, got {self.canvas_dpi}")

    @property
    def grid_size(self) -> Tuple[int, int]:
        """(width, height) of the sampled pixel grid."""
        return self.width * self.canvas_dpi, self.height * self.canvas_dpi

    def filter_scale(self, scale: float) -> float:
        """Displacement filter scale for a map rendered at ``canvas_dpi``."""
        return scale / self.canvas_dpi

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MapConfig":
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        lens = filtered.pop("lens", None)
        if isinstance(lens, dict):
            filtered["lens"] = LensConfig.from_dict(lens)
        elif lens is not None:
            filtered["lens"] = lens
        for key in ("width", "height", "canvas_dpi"):
            if key in filtered:
                filtered[key] = _as_int(key, filtered[key])
        return cls(**filtered)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "MapConfig":
        with open(path) as f:
            return cls.from_dict(yaml.safe_load(f) or {})
