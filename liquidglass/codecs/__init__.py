"""LiquidGlass Codecs: displacement map encoding/decoding."""

from .displacement import DisplacementMapCodec

__all__ = ["DisplacementMapCodec"]
