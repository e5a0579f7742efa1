"""CLI for rendering a single liquid glass displacement map."""

import argparse
from pathlib import Path

from liquidglass import LensConfig, MapConfig, DisplacementMapGenerator
from liquidglass.codecs import DisplacementMapCodec


def main():
    parser = argparse.ArgumentParser(description="Render a liquid glass displacement map to PNG")
    parser.add_argument("output", type=Path, help="Output PNG path (an .npy sidecar is written next to it)")
    parser.add_argument("--config", type=Path, default=None, help="Optional YAML map configuration")
    parser.add_argument("-W", "--width", type=int, default=None, help="Width in CSS pixels")
    parser.add_argument("-H", "--height", type=int, default=None, help="Height in CSS pixels")
    parser.add_argument("--canvas-dpi", type=int, default=None, help="Grid pixels per CSS pixel")
    parser.add_argument("--vectorized", action="store_true", help="Sample the whole grid at once with torch")
    parser.add_argument("--device", type=str, default=None, choices=["cpu", "cuda"], help="Device for vectorized sampling")

    lens = parser.add_argument_group("lens")
    lens.add_argument("--half-width", type=float, default=None)
    lens.add_argument("--half-height", type=float, default=None)
    lens.add_argument("--corner-radius", type=float, default=None)
    lens.add_argument("--edge-offset", type=float, default=None)
    lens.add_argument("--falloff", type=float, default=None)

    args = parser.parse_args()

    cfg = MapConfig.from_yaml(args.config) if args.config else MapConfig(name=args.output.stem)
    for key in ("width", "height", "canvas_dpi", "device"):
        value = getattr(args, key)
        if value is not None:
            setattr(cfg, key, value)
    if args.vectorized:
        cfg.vectorized = True

    lens_overrides = {
        k: getattr(args, k)
        for k in LensConfig.__dataclass_fields__
        if getattr(args, k, None) is not None
    }
    if lens_overrides:
        cfg.lens = LensConfig.from_dict({**cfg.lens.to_dict(), **lens_overrides})

    width, height = cfg.grid_size
    generator = DisplacementMapGenerator(vectorized=cfg.vectorized, device=cfg.device)
    buffer, scale = generator.generate(cfg.lens.build(), width, height)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    DisplacementMapCodec.to_image(buffer, width, height).save(args.output)
    sidecar = args.output.with_suffix(".npy")
    DisplacementMapCodec.save(
        sidecar,
        buffer=buffer,
        width=width,
        height=height,
        scale=scale,
        meta={"name": cfg.name, "canvas_dpi": cfg.canvas_dpi, "filter_scale": cfg.filter_scale(scale)},
    )

    print(f"Rendered {width}x{height} map -> {args.output}")
    print(f"  Scale: {scale:.4f}")
    print(f"  Filter scale: {cfg.filter_scale(scale):.4f}")


if __name__ == "__main__":
    main()
