import logging

import torch

logger = logging.getLogger(__name__)


def get_device(preferred: str = "auto") -> torch.device:
    """
    Pick the device used to apply LUTs.

    Args:
        preferred: "auto", "cpu", "cuda" or "mps". An explicit choice that is
                   not available falls back to the CPU.

    Returns:
        torch.device: The selected device
    """
    if preferred == "cpu":
        return torch.device("cpu")

    cuda_ok = torch.cuda.is_available()
    mps_ok = torch.backends.mps.is_available()

    if (preferred == "cuda" and not cuda_ok) or (preferred == "mps" and not mps_ok):
        logger.warning(f"Requested device '{preferred}' is not available, using CPU")
        return torch.device("cpu")
    if preferred in ("cuda", "mps"):
        return torch.device(preferred)

    if cuda_ok:
        return torch.device("cuda")
    if mps_ok:
        return torch.device("mps")
    return torch.device("cpu")
