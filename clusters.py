"""
Turn raw k-means centroids into canonical, population-sorted color clusters.
"""

from dataclasses import dataclass

import numpy as np

from color_math import ColorSpace, rgb_to_hex, rgb_to_hsv, rgb_to_lab


@dataclass(frozen=True)
class ColorCluster:
    """A representative color and its share of the sampled pixels."""
    rgb: tuple  # (r, g, b) canonical 8-bit
    hsv: tuple  # (h, s, v) derived from rgb
    lab: tuple  # (L, a, b) derived from rgb
    count: int  # Samples assigned to this cluster
    share: float  # count / total sampled pixels

    @property
    def hex(self) -> str:
        return rgb_to_hex(self.rgb)

    def to_dict(self) -> dict:
        return {
            'rgb': {'r': self.rgb[0], 'g': self.rgb[1], 'b': self.rgb[2]},
            'hsv': list(self.hsv),
            'lab': list(self.lab),
            'count': self.count,
            'share': self.share,
        }


def to_dataset(samples: np.ndarray, space: ColorSpace) -> np.ndarray:
    """Convert (n, 3) RGB8 samples into working-space points."""
    rgb = np.asarray(samples, dtype=np.float64).reshape(-1, 3)
    return space.to_working(rgb)


def canonical_color(rgb8) -> tuple[tuple, tuple, tuple]:
    """(rgb, hsv, lab) tuples, all derived from the same 8-bit RGB value."""
    rgb = tuple(int(c) for c in rgb8)
    hsv = tuple(float(c) for c in rgb_to_hsv(rgb))
    lab = tuple(float(c) for c in rgb_to_lab(rgb))
    return rgb, hsv, lab


def build_clusters(centroids: np.ndarray, counts: np.ndarray, space: ColorSpace,
                   total_pixels: int) -> list[ColorCluster]:
    """
    Build ColorCluster records from working-space centroids.

    Empty centroids are dropped. HSV and LAB come from the snapped RGB8
    value, not from the centroid itself. Sorted by count descending; equal
    counts keep centroid order.
    """
    clusters = []
    for centroid, count in zip(np.asarray(centroids), np.asarray(counts)):
        if count == 0:
            continue

        rgb, hsv, lab = canonical_color(space.from_working(centroid))
        clusters.append(ColorCluster(
            rgb=rgb,
            hsv=hsv,
            lab=lab,
            count=int(count),
            share=int(count) / total_pixels if total_pixels else 0.0,
        ))

    clusters.sort(key=lambda c: -c.count)
    return clusters
