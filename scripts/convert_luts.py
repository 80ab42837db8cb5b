#!/usr/bin/env python3
"""
Batch convert a folder of vendor LUTs into standard .cube files.

Every file with a recognised LUT extension is decoded (in parallel, on the
same bounded pool the previews use) and written next to the others in the
output folder. Files that fail to decode are reported and skipped.
"""

import sys
from functools import partial
from pathlib import Path

import typer
from tqdm import tqdm
from typing_extensions import Annotated

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from luts import decode, is_lut_asset
from utils.assets import FileAssetProvider
from utils.cache import AssetCache
from utils.io import write_cube_file

app = typer.Typer()


@app.command()
def main(
    input_dir: Annotated[str, typer.Argument(help="Folder containing vendor LUT files")],
    output_dir: Annotated[str, typer.Option(help="Folder to write .cube files to")] = "converted",
    recursive: Annotated[bool, typer.Option(help="Also convert LUTs in subfolders")] = False,
    workers: Annotated[int, typer.Option(min=1, help="Concurrent decodes")] = 4,
) -> None:
    """
    Convert every LUT under INPUT_DIR to .cube.
    """
    root = Path(input_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"Input folder not found: {input_dir}")

    pattern = "**/*" if recursive else "*"
    keys = sorted(
        str(p.relative_to(root)) for p in root.glob(pattern) if p.is_file() and is_lut_asset(p.name)
    )
    if not keys:
        print(f"No LUT files found in {input_dir}")
        raise typer.Exit(0)

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    failed = []
    provider = FileAssetProvider(root)
    with AssetCache(partial(decode, provider=provider), max_workers=workers) as cache:
        for key, future in tqdm(cache.prefetch(keys), desc="Converting"):
            cube = future.result()
            if cube is None:
                failed.append(key)
                continue
            # Subfolders and the source extension stay in the name so outputs never collide
            name = key.removesuffix(".enc").replace("/", "__").replace("\\", "__")
            target = out / f"{name}.cube"
            write_cube_file(target, cube, title=Path(key).stem)

    print(f"Converted {len(keys) - len(failed)}/{len(keys)} LUTs to {out}/")
    if failed:
        print("Skipped (not a usable LUT):")
        for key in failed:
            print(f"  - {key}")


if __name__ == "__main__":
    app()
