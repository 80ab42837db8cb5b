from pathlib import Path


def write_cube_file(lut_path: str | Path, cube, title: str = "Converted LUT") -> None:
    """
    Save a ColorCube to a .cube file

    Args:
        lut_path: Path where the .cube file will be saved
        cube: ColorCube to write
        title: Title written to the TITLE line
    """
    # ColorCube samples are already red-fastest, which is the .cube line order
    samples = cube.samples

    with open(lut_path, "w") as f:
        f.write(f'TITLE "{title}"\n')
        f.write("# Normalized from a vendor LUT\n")
        f.write(f"LUT_3D_SIZE {cube.size}\n")
        f.write("\n")
        for rgb in samples:
            f.write(f"{rgb[0]:.6f} {rgb[1]:.6f} {rgb[2]:.6f}\n")
