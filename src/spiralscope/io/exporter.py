"""
Frame export helpers.

Converts pygame surfaces to numpy arrays for the video encoder and
writes still images with Pillow.
"""

from pathlib import Path
from typing import Union

import numpy as np
import pygame
from PIL import Image


def surface_to_array(surface: pygame.Surface) -> np.ndarray:
    """Convert a pygame surface to an (H, W, 3) uint8 array."""
    # pygame uses (width, height) but numpy expects (height, width)
    arr = pygame.surfarray.array3d(surface)
    return np.ascontiguousarray(np.transpose(arr, (1, 0, 2)))


def export_png(surface: pygame.Surface, output_path: Union[str, Path]) -> Path:
    """
    Write a surface to a PNG file.

    Args:
        surface: Rendered frame.
        output_path: Destination path; parent directories are created.

    Returns:
        Path to written file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(surface_to_array(surface)).save(output_path, format="PNG")
    return output_path
