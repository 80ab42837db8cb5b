import torch
import torch.nn.functional as F


def apply_lut(
    image: torch.Tensor,
    lut_tensor: torch.Tensor,
    intensity: float = 1.0,
) -> torch.Tensor:
    """
    Apply a 3D LUT using PyTorch's grid_sample for trilinear interpolation

    Args:
        image: Input image tensor, (C, H, W) or (B, C, H, W) with values in [0, 1]
        lut_tensor: LUT tensor of shape (size, size, size, 3) indexed [B][G][R]
                    (see ColorCube.to_tensor)
        intensity: Blend between the original (0.0) and the graded image (1.0)

    Returns:
        Graded image(s) in the same layout as the input
    """
    if not 0.0 <= intensity <= 1.0:
        raise ValueError(f"intensity must be in [0, 1], got {intensity}")

    is_batched = image.ndim == 4
    x = image if is_batched else image.unsqueeze(0)
    B, C, H, W = x.shape

    # (B, C, H, W) -> (B, H, W, C) lookup coordinates in [-1, 1]
    coords = x.permute(0, 2, 3, 1).clamp(0, 1) * 2.0 - 1.0
    coords = coords.reshape(B, H * W, 1, 1, 3)

    # LUT dims (D, H, W) = (B, G, R), so grid [r, g, b] samples [W, H, D]
    lut = lut_tensor.permute(3, 0, 1, 2).unsqueeze(0).to(x.device, x.dtype)
    lut = lut.expand(B, -1, -1, -1, -1)

    # align_corners=True maps 0 and 1 onto the first and last lattice points
    graded = F.grid_sample(lut, coords, mode="bilinear", padding_mode="border", align_corners=True)
    graded = graded.view(B, 3, H, W)

    if intensity < 1.0:
        graded = torch.lerp(x, graded, intensity)

    return graded if is_batched else graded.squeeze(0)


def identity_lut(resolution: int = 32) -> torch.Tensor:
    """
    Create an identity LUT with [B][G][R] spatial indexing.

    At position [b, g, r] the stored RGB value is [r, g, b].
    """
    coords = torch.linspace(0, 1, resolution)
    b, g, r = torch.meshgrid(coords, coords, coords, indexing="ij")
    return torch.stack([r, g, b], dim=-1)
