"""
Load an image and sample its pixels for clustering.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

# Image size limits (security: prevent decompression bombs)
MAX_IMAGE_PIXELS = 50_000_000  # 50 megapixels
MAX_IMAGE_DIMENSION = 10_000  # 10k pixels per side

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])


@dataclass(frozen=True)
class SampleParams:
    path: Path
    stride: int = 4  # Take every stride-th pixel along each axis
    min_lum: int = 0  # Drop pixels with Rec.601 luma below this (0-255)
    max_samples: int = 300_000
    max_dimension: Optional[int] = 3200  # Downscale so the longest side fits
    seed: int = 1


@dataclass
class SampleResult:
    samples: np.ndarray  # (n, 3) uint8 RGB in scan order
    sampled_pixels: int  # len(samples)
    image_size: tuple  # (width, height) after any downscale


def load_image(path: Path) -> Image.Image:
    """
    Open and validate an image, returning it in RGB mode.

    Raises:
        FileNotFoundError: If image file doesn't exist
        ValueError: If file is not a valid image or exceeds size limits
    """
    try:
        img = Image.open(path)
    except FileNotFoundError:
        raise FileNotFoundError(f"Image not found: {path}")
    except Exception as e:
        raise ValueError(f"Could not open image: {e}")

    width, height = img.size
    if width > MAX_IMAGE_DIMENSION or height > MAX_IMAGE_DIMENSION:
        raise ValueError(
            f"Image dimensions {width}x{height} exceed maximum "
            f"{MAX_IMAGE_DIMENSION}x{MAX_IMAGE_DIMENSION}"
        )
    if width * height > MAX_IMAGE_PIXELS:
        raise ValueError(
            f"Image has {width * height:,} pixels, exceeding maximum {MAX_IMAGE_PIXELS:,}"
        )

    return img.convert('RGB')


def sample_pixels(pixels: np.ndarray, params: SampleParams) -> np.ndarray:
    """Grid-stride, luma-filter and cap an (h, w, 3) pixel array."""
    stride = max(1, params.stride)
    samples = pixels[::stride, ::stride].reshape(-1, 3)

    if params.min_lum > 0:
        luma = samples.astype(np.float64) @ LUMA_WEIGHTS
        samples = samples[luma >= params.min_lum]

    if len(samples) > params.max_samples:
        rng = np.random.default_rng(params.seed)
        keep = np.sort(rng.choice(len(samples), size=params.max_samples, replace=False))
        samples = samples[keep]

    return samples


def prepare_samples(params: SampleParams) -> SampleResult:
    """
    Load the image at params.path and return its RGB8 samples.

    Raises:
        FileNotFoundError: If image file doesn't exist
        ValueError: If the image is invalid or yields no samples
    """
    img = load_image(Path(params.path))

    if params.max_dimension and max(img.size) > params.max_dimension:
        img.thumbnail((params.max_dimension, params.max_dimension))

    pixels = np.asarray(img, dtype=np.uint8)
    samples = sample_pixels(pixels, params)
    if len(samples) == 0:
        raise ValueError("No pixels sampled from image")

    logger.debug("Sampled %d pixels from %dx%d image", len(samples), *img.size)
    return SampleResult(samples=samples, sampled_pixels=len(samples), image_size=img.size)
