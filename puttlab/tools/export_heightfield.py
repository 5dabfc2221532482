import json
import os
import sys

import numpy as np

from puttlab.terrain.heightmap import TerrainContext


def export_heightfield(terrain: TerrainContext, out_dir: str, name: str = "heightfield") -> tuple[str, str]:
    """
    Write <name>.bin (float32, row-major [iz, ix], meters) and <name>.json.

    Returns (bin_path, meta_path).
    """
    Y = terrain.height_grid_m().astype(np.float32)
    x_axis, z_axis = terrain.axes()

    os.makedirs(out_dir, exist_ok=True)
    bin_path = os.path.join(out_dir, f"{name}.bin")
    meta_path = os.path.join(out_dir, f"{name}.json")

    Y.tofile(bin_path)

    meta = {
        "units": {"x": "m", "z": "m", "y": "m"},
        "seed": terrain.seed,
        "grid": {
            "nx": int(Y.shape[1]),
            "nz": int(Y.shape[0]),
            "resolution_m": float(x_axis[1] - x_axis[0]),
            "x_min_m": float(np.min(x_axis)),
            "z_min_m": float(np.min(z_axis)),
            "world_size_m": terrain.world_size,
        },
    }

    with open(meta_path, "w") as f:
        json.dump(meta, f, indent=2)

    return bin_path, meta_path


def load_heightfield(meta_path: str) -> np.ndarray:
    """Read back the height grid (meters) written by export_heightfield."""
    with open(meta_path, "r") as f:
        meta = json.load(f)
    grid = meta["grid"]
    bin_path = os.path.splitext(meta_path)[0] + ".bin"
    raw = np.fromfile(bin_path, dtype=np.float32)
    return raw.reshape((grid["nz"], grid["nx"])).astype(np.float64)


def main(out_dir: str, seed: int | None = None):
    terrain = TerrainContext.build(seed)
    bin_path, meta_path = export_heightfield(terrain, out_dir)
    print(f"Wrote:\n  {bin_path}\n  {meta_path}")
    print(f"Grid: n={terrain.grid_size}, world={terrain.world_size}m, seed={seed}")


if __name__ == "__main__":
    if len(sys.argv) not in (2, 3):
        print("Usage: python -m puttlab.tools.export_heightfield <out_dir> [seed]")
        print("Example: python -m puttlab.tools.export_heightfield out/ 42")
        sys.exit(1)
    main(out_dir=sys.argv[1], seed=int(sys.argv[2]) if len(sys.argv) == 3 else None)
