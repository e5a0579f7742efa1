"""CLI for rendering a set of displacement maps from YAML configuration."""

import argparse
from pathlib import Path

from liquidglass.generators import MapSetGenerator


def main():
    parser = argparse.ArgumentParser(description="Render displacement maps from YAML configuration")
    parser.add_argument("config", type=Path, help="Path to YAML configuration file")
    parser.add_argument("-w", "--workers", type=int, default=None, help="Number of parallel workers")
    parser.add_argument("--no-skip", action="store_true", help="Don't skip existing outputs")
    parser.add_argument("--no-progress", action="store_true", help="Disable progress bar")

    args = parser.parse_args()

    gen = MapSetGenerator(args.config)
    results = gen.generate(
        num_workers=args.workers,
        skip_existing=not args.no_skip,
        progress=not args.no_progress,
    )

    print(f"\nRendering complete -> {gen.output_root}")
    print(f"  Total maps: {results['total']}")
    print(f"  Processed: {results['processed']}")
    print(f"  Skipped: {results['skipped']}")
    print(f"  Errors: {len(results['errors'])}")

    if results['errors']:
        print("\nErrors:")
        for err in results['errors'][:10]:
            print(f"  {err['name']}: {err['error']}")
        if len(results['errors']) > 10:
            print(f"  ... and {len(results['errors']) - 10} more")


if __name__ == "__main__":
    main()
