"""Displacement map encoding/decoding for storage and display."""

import base64
import io
import numpy as np
from pathlib import Path
from PIL import Image
from typing import Dict, Any, Union, Optional, Tuple


class DisplacementMapCodec:
    """Encode/decode RGBA displacement buffers.

    Images are RGBA PNGs. The .npy sidecar is a dict with:
        - pixels: [H, W, 4] uint8 RGBA buffer
        - scale: half the largest displacement, in pixels
        - width, height: grid size
        - meta: additional metadata (optional)
    """

    VERSION = 1

    @staticmethod
    def _as_pixels(buffer: np.ndarray, width: int, height: int) -> np.ndarray:
        buffer = np.asarray(buffer, dtype=np.uint8)
        if buffer.size != width * height * 4:
            raise ValueError(
                f"Buffer of {buffer.size} bytes does not match {width}x{height} RGBA "
                f"({width * height * 4} bytes)"
            )
        return buffer.reshape(height, width, 4)

    @classmethod
    def to_image(cls, buffer: np.ndarray, width: int, height: int) -> Image.Image:
        return Image.fromarray(cls._as_pixels(buffer, width, height))

    @classmethod
    def to_png_bytes(cls, buffer: np.ndarray, width: int, height: int) -> bytes:
        out = io.BytesIO()
        cls.to_image(buffer, width, height).save(out, format="PNG")
        return out.getvalue()

    @classmethod
    def to_data_url(cls, buffer: np.ndarray, width: int, height: int) -> str:
        """PNG data URL, usable as an feImage href."""
        png = cls.to_png_bytes(buffer, width, height)
        return "data:image/png;base64," + base64.b64encode(png).decode("ascii")

    @staticmethod
    def from_image(image: Union[Image.Image, str, Path]) -> Tuple[np.ndarray, int, int]:
        """Load an image back into a flat RGBA buffer.

        Returns:
            (buffer, width, height)
        """
        if isinstance(image, Image.Image):
            pixels = np.array(image.convert("RGBA"), dtype=np.uint8)
        else:
            with Image.open(image) as img:
                pixels = np.array(img.convert("RGBA"), dtype=np.uint8)
        height, width = pixels.shape[:2]
        return pixels.reshape(-1), width, height

    @classmethod
    def displacements(cls, buffer: np.ndarray, width: int, height: int, scale: float) -> np.ndarray:
        """Recover per-pixel (dx, dy) in pixels from an encoded buffer.

        Exact up to 8-bit quantisation for unsaturated channels; channels
        clipped at 0 or 255 only give a lower bound on the magnitude.

        Returns:
            [H, W, 2] float32
        """
        pixels = cls._as_pixels(buffer, width, height)
        rg = pixels[..., :2].astype(np.float32) / 255.0
        return (rg - 0.5) * np.float32(scale)

    @classmethod
    def encode(
        cls,
        buffer: np.ndarray,
        width: int,
        height: int,
        scale: float,
        meta: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Encode a displacement map to a dict for saving."""
        data = {
            "version": cls.VERSION,
            "pixels": cls._as_pixels(buffer, width, height).copy(),
            "scale": float(scale),
            "width": int(width),
            "height": int(height),
        }
        if meta is not None:
            data["meta"] = meta
        return data

    @classmethod
    def decode(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """Decode a loaded dict into a flat buffer plus scale."""
        pixels = np.asarray(data["pixels"], dtype=np.uint8)
        height, width = pixels.shape[:2]
        result = {
            "buffer": pixels.reshape(-1),
            "width": int(data.get("width", width)),
            "height": int(data.get("height", height)),
            "scale": float(data["scale"]),
            "version": data.get("version", 0),
        }
        if "meta" in data:
            result["meta"] = data["meta"]
        return result

    @classmethod
    def save(cls, path: Union[str, Path], **kwargs) -> None:
        """Save a displacement map to a .npy file."""
        data = cls.encode(**kwargs)
        np.save(path, data, allow_pickle=True)

    @classmethod
    def load(cls, path: Union[str, Path]) -> Dict[str, Any]:
        """Load a displacement map from a .npy file."""
        data = np.load(path, allow_pickle=True).item()
        return cls.decode(data)
