"""
LUT decoding and watermark rendering CLI.

The `decode` command normalises a vendor LUT (.cube, HALD/strip image or raw
binary) into a standard .cube file, `apply` grades an image with it and
`previews` renders thumbnails for a whole folder of LUTs.

The `vivo` and `tecno` commands lay out a vendor watermark template below a
photo; `modes` lists the Tecno modes available per orientation.
"""

import logging
import threading
from functools import partial
from pathlib import Path
from typing import Optional

import torch
import typer
from tqdm import tqdm
from typing_extensions import Annotated

from luts import DecodeError, decode, is_lut_asset
from utils import (
    AssetCache,
    Config,
    ConfigValidationError,
    FileAssetProvider,
    apply_lut,
    get_device,
    load_config,
    load_image,
    make_thumbnail,
    pil_to_tensor,
    save_image,
    tensor_to_pil,
    write_cube_file,
)
from watermarks import (
    FontBook,
    Orientation,
    ParseError,
    RuntimeContent,
    WatermarkCompositor,
    apply_watermark,
    basic_tecno_mode,
    get_mode,
    parse_tecno_modes,
    parse_vivo,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",  # Simple format for CLI output
)
logger = logging.getLogger(__name__)

app = typer.Typer()

ConfigOption = Annotated[Optional[str], typer.Option(help="Path to a JSON config file.")]
AssetRootOption = Annotated[
    Optional[str], typer.Option(help="Directory asset paths are relative to (overrides config).")
]
DeviceNameOption = Annotated[Optional[str], typer.Option(help="Device name shown in the watermark.")]
LensOption = Annotated[Optional[str], typer.Option(help="Lens info, e.g. '23mm f/1.8 1/100s ISO100'.")]
TimeOption = Annotated[Optional[str], typer.Option(help="Capture time text.")]
LocationOption = Annotated[Optional[str], typer.Option(help="Location text.")]


def _load_settings(config: Optional[str], asset_root: Optional[str]) -> Config:
    try:
        settings = load_config(config)
    except ConfigValidationError as e:
        logger.error(str(e))
        raise typer.Exit(1)
    if asset_root is not None:
        settings.asset_root = asset_root
    return settings


def _decode_or_exit(lut: str, provider: FileAssetProvider):
    try:
        return decode(lut, provider)
    except (DecodeError, FileNotFoundError) as e:
        logger.error(f"Could not decode {lut}: {e}")
        raise typer.Exit(1)


def _grade(image, cube, device: torch.device, intensity: float = 1.0):
    with torch.no_grad():
        tensor = pil_to_tensor(image).to(device)
        graded = apply_lut(tensor, cube.to_tensor().to(device), intensity=intensity)
    return tensor_to_pil(graded)


@app.command("decode")
def decode_command(
    lut: Annotated[str, typer.Argument(help="LUT asset path (relative to the asset root).")],
    output_path: Annotated[str, typer.Option(help="Where to write the .cube file.")] = "lut.cube",
    config: ConfigOption = None,
    asset_root: AssetRootOption = None,
) -> None:
    """
    Decode a vendor LUT and write it as a standard .cube file.
    """
    settings = _load_settings(config, asset_root)
    cube = _decode_or_exit(lut, FileAssetProvider(settings.asset_root))

    write_cube_file(output_path, cube, title=Path(lut).stem)
    logger.info(f"Decoded {lut} (size {cube.size}) -> {output_path}")


@app.command()
def apply(
    lut: Annotated[str, typer.Argument(help="LUT asset path (relative to the asset root).")],
    image: Annotated[str, typer.Argument(help="Image to grade.")],
    output_path: str = "output.png",
    intensity: Annotated[float, typer.Option(min=0.0, max=1.0, help="LUT strength.")] = 1.0,
    config: ConfigOption = None,
    asset_root: AssetRootOption = None,
) -> None:
    """
    Apply a LUT to an image.
    """
    settings = _load_settings(config, asset_root)
    if not Path(image).exists():
        raise FileNotFoundError(f"Image file not found: {image}")

    cube = _decode_or_exit(lut, FileAssetProvider(settings.asset_root))
    device = get_device(settings.device)
    logger.info(f"Using device: {device}")

    photo = load_image(image, max_pixels=settings.preview.max_pixels)
    save_image(_grade(photo, cube, device, intensity), output_path, quality=settings.save_quality)
    logger.info(f"Saved graded image to {output_path}")


@app.command()
def previews(
    lut_dir: Annotated[str, typer.Argument(help="Folder of LUT assets (relative to the asset root).")],
    image: Annotated[str, typer.Argument(help="Image to preview the LUTs on.")],
    output_dir: str = "previews",
    config: ConfigOption = None,
    asset_root: AssetRootOption = None,
) -> None:
    """
    Render a thumbnail of an image graded by every LUT in a folder.

    LUTs are decoded on a bounded worker pool; unusable files are skipped.
    Ctrl-C stops after the current thumbnail.
    """
    settings = _load_settings(config, asset_root)
    root = Path(settings.asset_root)
    keys = sorted(
        str(p.relative_to(root))
        for p in (root / lut_dir).iterdir()
        if p.is_file() and is_lut_asset(p.name)
    )
    if not keys:
        logger.warning(f"No LUT files found in {root / lut_dir}")
        return

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    thumb = make_thumbnail(load_image(image), settings.preview.thumbnail_size)
    device = get_device(settings.device)
    cancel = threading.Event()
    provider = FileAssetProvider(settings.asset_root)

    rendered = 0
    with AssetCache(partial(decode, provider=provider), max_workers=settings.preview.max_workers) as cache:
        futures = cache.prefetch(keys, cancel)
        try:
            for key, future in tqdm(futures, desc="Previews"):
                if cancel.is_set():
                    break
                cube = future.result()
                if cube is None:
                    continue
                target = out / f"{Path(key).name}.png"
                save_image(_grade(thumb, cube, device), target)
                rendered += 1
        except KeyboardInterrupt:
            cancel.set()
            logger.info("Cancelled, waiting for running decodes to finish")

    logger.info(f"Rendered {rendered}/{len(keys)} previews to {out}/")


def _runtime_content(device_name, lens, time, location) -> RuntimeContent:
    return RuntimeContent(device_name=device_name, lens_info=lens, time_text=time, location_text=location)


def _compositor(settings: Config, provider: FileAssetProvider) -> WatermarkCompositor:
    fonts = FontBook(settings.resolve_dirs(settings.font_dirs), provider)
    return WatermarkCompositor(provider, fonts, settings.resolve_dirs(settings.image_dirs))


@app.command()
def vivo(
    template: Annotated[str, typer.Argument(help="Vivo template file.")],
    image: Annotated[str, typer.Argument(help="Photo to watermark.")],
    output_path: str = "watermarked.jpg",
    device_name: DeviceNameOption = None,
    lens: LensOption = None,
    time: TimeOption = None,
    location: LocationOption = None,
    config: ConfigOption = None,
    asset_root: AssetRootOption = None,
) -> None:
    """
    Render a Vivo watermark template below a photo.
    """
    settings = _load_settings(config, asset_root)
    provider = FileAssetProvider()

    try:
        parsed = parse_vivo(provider.read_bytes(template))
    except (ParseError, FileNotFoundError) as e:
        logger.error(f"Could not parse {template}: {e}")
        raise typer.Exit(1)

    photo = load_image(image, max_pixels=settings.preview.max_pixels)
    content = _runtime_content(device_name, lens, time, location)
    result = apply_watermark(photo, parsed, content, _compositor(settings, provider))
    save_image(result, output_path, quality=settings.save_quality)
    logger.info(f"Saved {result.width}x{result.height} image to {output_path}")


@app.command()
def tecno(
    watermark_config: Annotated[str, typer.Argument(help="Tecno watermark JSON file.")],
    image: Annotated[str, typer.Argument(help="Photo to watermark.")],
    mode: Annotated[str, typer.Option(help="Mode name from WM_LAYOUTS.")],
    landscape: Annotated[bool, typer.Option(help="Use the landscape mode list.")] = False,
    output_path: str = "watermarked.jpg",
    device_name: DeviceNameOption = None,
    lens: LensOption = None,
    time: TimeOption = None,
    location: LocationOption = None,
    config: ConfigOption = None,
    asset_root: AssetRootOption = None,
) -> None:
    """
    Render a Tecno watermark mode below a photo.

    Falls back to a plain bar with device name and time when the mode is not
    offered for the orientation.
    """
    settings = _load_settings(config, asset_root)
    provider = FileAssetProvider()

    try:
        modes = parse_tecno_modes(provider.read_bytes(watermark_config))
    except (ParseError, FileNotFoundError) as e:
        logger.error(f"Could not parse {watermark_config}: {e}")
        raise typer.Exit(1)

    orientation = Orientation.LANDSCAPE if landscape else Orientation.PORTRAIT
    mode_config = get_mode(modes, mode, orientation)
    if mode_config is None:
        logger.warning(f"Mode '{mode}' is not available in {orientation.name.lower()}, using basic layout")
        mode_config = basic_tecno_mode()

    photo = load_image(image, max_pixels=settings.preview.max_pixels)
    content = _runtime_content(device_name, lens, time, location)
    result = apply_watermark(photo, mode_config, content, _compositor(settings, provider))
    save_image(result, output_path, quality=settings.save_quality)
    logger.info(f"Saved {result.width}x{result.height} image to {output_path}")


@app.command()
def modes(
    watermark_config: Annotated[str, typer.Argument(help="Tecno watermark JSON file.")],
) -> None:
    """
    List the Tecno modes offered per orientation.
    """
    try:
        parsed = parse_tecno_modes(FileAssetProvider().read_bytes(watermark_config))
    except (ParseError, FileNotFoundError) as e:
        logger.error(f"Could not parse {watermark_config}: {e}")
        raise typer.Exit(1)

    for orientation in Orientation:
        names = [name for name, o in parsed if o == orientation]
        logger.info(f"{orientation.name.lower()}: {', '.join(names) if names else '(none)'}")


if __name__ == "__main__":
    app()
