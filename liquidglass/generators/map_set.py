"""Map Set Generator: batch displacement map rendering from YAML config."""

import logging
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional, Union
from concurrent.futures import ProcessPoolExecutor, as_completed
from tqdm import tqdm
import traceback

from ..core import MapConfig, DisplacementMapGenerator
from ..codecs import DisplacementMapCodec

logger = logging.getLogger(__name__)


def _render_map(cfg_dict: Dict[str, Any], output_root: Path) -> Dict[str, Any]:
    """Render and save a single map (worker function)."""
    name = cfg_dict.get("name", "?")
    try:
        cfg = MapConfig.from_dict(cfg_dict)
        width, height = cfg.grid_size

        generator = DisplacementMapGenerator(vectorized=cfg.vectorized, device=cfg.device)
        buffer, scale = generator.generate(cfg.lens.build(), width, height)

        image_path = output_root / f"{cfg.name}.png"
        sidecar_path = output_root / f"{cfg.name}.npy"
        image_path.parent.mkdir(parents=True, exist_ok=True)

        DisplacementMapCodec.to_image(buffer, width, height).save(image_path)
        DisplacementMapCodec.save(
            sidecar_path,
            buffer=buffer,
            width=width,
            height=height,
            scale=scale,
            meta={
                "name": cfg.name,
                "canvas_dpi": cfg.canvas_dpi,
                "filter_scale": cfg.filter_scale(scale),
                "config": cfg.to_dict(),
            },
        )
        logger.debug("Rendered %s (%dx%d, scale=%.4f)", cfg.name, width, height, scale)

        return {"name": cfg.name, "status": "success", "scale": scale}

    except Exception as e:
        return {
            "name": name,
            "status": "error",
            "error": str(e),
            "traceback": traceback.format_exc(),
        }


class MapSetGenerator:
    """Render a set of displacement maps described in YAML.

    YAML config format:
    ```yaml
    output:
      root: /path/to/maps

    defaults:
      width: 300
      height: 200
      canvas_dpi: 1

    maps:
      - name: lens_default
      - name: lens_wide
        width: 480
        lens:
          half_width: 0.4
          corner_radius: 0.5

    generation:
      vectorized: true
      device: cpu
      num_workers: 1
    ```
    """

    def __init__(self, config_path: Union[str, Path]):
        """Initialize generator from YAML config."""
        self.config_path = Path(config_path)
        with open(config_path) as f:
            self.config = yaml.safe_load(f) or {}

        output = self.config.get("output") or {}
        if "root" not in output:
            raise ValueError(f"{self.config_path}: missing output.root")

        self.output_root = Path(output["root"])

        gen_cfg = self.config.get("generation") or {}
        self.num_workers = int(gen_cfg.get("num_workers", 1))
        self.vectorized = bool(gen_cfg.get("vectorized", True))
        self.device = gen_cfg.get("device", "cpu")

        self.maps = self._load_maps()

    def _load_maps(self) -> List[MapConfig]:
        defaults = self.config.get("defaults") or {}
        maps = []
        seen = set()
        for i, entry in enumerate(self.config.get("maps") or []):
            d = {"vectorized": self.vectorized, "device": self.device, "name": f"map_{i:03d}"}
            d.update(defaults)
            entry = entry or {}
            d.update(entry)
            lens = dict(defaults.get("lens") or {})
            lens.update(entry.get("lens") or {})
            d["lens"] = lens

            cfg = MapConfig.from_dict(d)
            if cfg.name in seen:
                raise ValueError(f"{self.config_path}: duplicate map name '{cfg.name}'")
            seen.add(cfg.name)
            maps.append(cfg)
        return maps

    def generate(
        self,
        num_workers: Optional[int] = None,
        skip_existing: bool = True,
        progress: bool = True,
    ) -> Dict[str, Any]:
        """Render all maps.

        Args:
            num_workers: number of parallel workers (config value if None)
            skip_existing: skip maps whose PNG already exists
            progress: show progress bar

        Returns:
            dict with generation statistics
        """
        if num_workers is None:
            num_workers = self.num_workers

        to_render = []
        for cfg in self.maps:
            if skip_existing and (self.output_root / f"{cfg.name}.png").exists():
                continue
            to_render.append(cfg)

        results = {
            "total": len(self.maps),
            "processed": 0,
            "skipped": len(self.maps) - len(to_render),
            "errors": [],
        }
        if not to_render:
            return results

        if num_workers <= 1:
            iterator = tqdm(to_render, desc="Rendering") if progress else to_render
            for cfg in iterator:
                self._collect(results, _render_map(cfg.to_dict(), self.output_root))
        else:
            # CPU only across processes
            with ProcessPoolExecutor(max_workers=num_workers) as executor:
                futures = {}
                for cfg in to_render:
                    cfg_dict = cfg.to_dict()
                    cfg_dict["device"] = "cpu"
                    futures[executor.submit(_render_map, cfg_dict, self.output_root)] = cfg.name

                iterator = tqdm(as_completed(futures), total=len(futures), desc="Rendering") if progress else as_completed(futures)
                for future in iterator:
                    self._collect(results, future.result())

        return results

    def generate_single(self, name: str) -> Dict[str, Any]:
        """Render a single map by name."""
        cfg = next((m for m in self.maps if m.name == name), None)
        if cfg is None:
            return {"name": name, "status": "error", "error": f"Map {name} not found"}
        return _render_map(cfg.to_dict(), self.output_root)

    @staticmethod
    def _collect(results: Dict[str, Any], result: Dict[str, Any]) -> None:
        if result["status"] == "success":
            results["processed"] += 1
        else:
            logger.debug("Map %s failed: %s", result["name"], result["error"])
            results["errors"].append(result)
