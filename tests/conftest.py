import numpy as np
import pytest

from clusters import ColorCluster, canonical_color


def make_cluster(rgb, count, total=1000):
    rgb, hsv, lab = canonical_color(rgb)
    return ColorCluster(rgb=rgb, hsv=hsv, lab=lab, count=count, share=count / total)


@pytest.fixture
def cluster_factory():
    return make_cluster


@pytest.fixture
def album_samples():
    """A muted mid-gray cover with a saturated red, a teal and a dark shadow area."""
    rng = np.random.default_rng(5)
    parts = [
        np.tile([110, 112, 118], (600, 1)),
        np.tile([200, 40, 50], (150, 1)),
        np.tile([40, 170, 160], (120, 1)),
        np.tile([20, 20, 24], (130, 1)),
    ]
    samples = np.vstack(parts) + rng.integers(-3, 4, size=(1000, 3))
    return np.clip(samples, 0, 255).astype(np.uint8)
