"""
Color space conversions, WCAG contrast and CIE76 distance.

Every conversion accepts a single color of shape (3,) or an array of
shape (n, 3) and returns the same leading shape.
"""

from enum import Enum

import numpy as np


# =============================================================================
# Constants
# =============================================================================

# D65 reference white
XN, YN, ZN = 0.95047, 1.0, 1.08883

EPSILON = 0.008856
KAPPA = 903.3

# u', v' chromaticity of the reference white
UN_PRIME = 4 * XN / (XN + 15 * YN + 3 * ZN)
VN_PRIME = 9 * YN / (XN + 15 * YN + 3 * ZN)

RGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
])

XYZ_TO_RGB = np.array([
    [3.2404542, -1.5371385, -0.4985314],
    [-0.9692660, 1.8760108, 0.0415560],
    [0.0556434, -0.2040259, 1.0572252],
])

# BT.601 analog YUV on [0, 1] RGB
RGB_TO_YUV = np.array([
    [0.299, 0.587, 0.114],
    [-0.14713, -0.28886, 0.436],
    [0.615, -0.51499, -0.10001],
])
YUV_TO_RGB = np.linalg.inv(RGB_TO_YUV)

LUMINANCE_WEIGHTS = np.array([0.2126, 0.7152, 0.0722])


def _as_float(values) -> np.ndarray:
    return np.asarray(values, dtype=np.float64)


def _stack(*channels) -> np.ndarray:
    return np.stack(channels, axis=-1)


# =============================================================================
# sRGB <-> linear <-> XYZ
# =============================================================================

def srgb_to_linear(rgb_norm: np.ndarray) -> np.ndarray:
    """Apply the sRGB linearization to values in [0, 1]."""
    rgb_norm = _as_float(rgb_norm)
    return np.where(rgb_norm > 0.04045, ((rgb_norm + 0.055) / 1.055) ** 2.4, rgb_norm / 12.92)


def linear_to_srgb(rgb_linear: np.ndarray) -> np.ndarray:
    """Apply the sRGB gamma curve, clipping to [0, 1] first."""
    rgb_linear = np.clip(_as_float(rgb_linear), 0.0, 1.0)
    return np.where(
        rgb_linear > 0.0031308,
        1.055 * np.power(rgb_linear, 1 / 2.4) - 0.055,
        12.92 * rgb_linear,
    )


def quantize_rgb(rgb: np.ndarray) -> np.ndarray:
    """Snap float RGB (0-255 scale) to 8-bit integer channels."""
    return np.clip(np.round(_as_float(rgb)), 0, 255).astype(np.uint8)


def rgb_to_xyz(rgb: np.ndarray) -> np.ndarray:
    """Convert RGB (0-255) to CIE XYZ."""
    rgb_linear = srgb_to_linear(_as_float(rgb) / 255.0)
    return rgb_linear @ RGB_TO_XYZ.T


def xyz_to_linear_rgb(xyz: np.ndarray) -> np.ndarray:
    """Convert CIE XYZ to unclipped linear RGB."""
    return _as_float(xyz) @ XYZ_TO_RGB.T


def xyz_to_rgb8(xyz: np.ndarray) -> np.ndarray:
    return quantize_rgb(linear_to_srgb(xyz_to_linear_rgb(xyz)) * 255)


# =============================================================================
# CIE Lab
# =============================================================================

def rgb_to_lab(rgb: np.ndarray) -> np.ndarray:
    """Convert RGB (0-255) to LAB color space."""
    xyz = rgb_to_xyz(rgb)
    x = xyz[..., 0] / XN
    y = xyz[..., 1] / YN
    z = xyz[..., 2] / ZN

    # Apply LAB nonlinearity
    fx = np.where(x > EPSILON, np.cbrt(x), (KAPPA * x + 16) / 116)
    fy = np.where(y > EPSILON, np.cbrt(y), (KAPPA * y + 16) / 116)
    fz = np.where(z > EPSILON, np.cbrt(z), (KAPPA * z + 16) / 116)

    L = 116 * fy - 16
    a = 500 * (fx - fy)
    b_val = 200 * (fy - fz)

    return _stack(L, a, b_val)


def lab_to_xyz(lab: np.ndarray) -> np.ndarray:
    """Convert LAB to CIE XYZ (D65)."""
    lab = _as_float(lab)
    L, a, b = lab[..., 0], lab[..., 1], lab[..., 2]

    fy = (L + 16) / 116
    fx = a / 500 + fy
    fz = fy - b / 200

    x = np.where(fx**3 > EPSILON, fx**3, (116 * fx - 16) / KAPPA)
    y = np.where(L > KAPPA * EPSILON, fy**3, L / KAPPA)
    z = np.where(fz**3 > EPSILON, fz**3, (116 * fz - 16) / KAPPA)

    return _stack(x * XN, y * YN, z * ZN)


def lab_to_rgb8(lab: np.ndarray) -> np.ndarray:
    """Convert LAB to canonical 8-bit RGB."""
    return xyz_to_rgb8(lab_to_xyz(lab))


# =============================================================================
# CIE Luv
# =============================================================================

def rgb_to_luv(rgb: np.ndarray) -> np.ndarray:
    """Convert RGB (0-255) to CIE Luv."""
    xyz = rgb_to_xyz(rgb)
    x, y, z = xyz[..., 0], xyz[..., 1], xyz[..., 2]

    yr = y / YN
    L = np.where(yr > EPSILON, 116 * np.cbrt(yr) - 16, KAPPA * yr)

    denom = x + 15 * y + 3 * z
    safe = np.where(denom > 0, denom, 1.0)
    u_prime = np.where(denom > 0, 4 * x / safe, UN_PRIME)
    v_prime = np.where(denom > 0, 9 * y / safe, VN_PRIME)

    u = 13 * L * (u_prime - UN_PRIME)
    v = 13 * L * (v_prime - VN_PRIME)
    return _stack(L, u, v)


def luv_to_rgb8(luv: np.ndarray) -> np.ndarray:
    """Convert CIE Luv to canonical 8-bit RGB."""
    luv = _as_float(luv)
    L, u, v = luv[..., 0], luv[..., 1], luv[..., 2]

    positive = L > 0
    safe_L = np.where(positive, L, 1.0)
    u_prime = u / (13 * safe_L) + UN_PRIME
    v_prime = v / (13 * safe_L) + VN_PRIME

    y = np.where(L > KAPPA * EPSILON, ((L + 16) / 116) ** 3, L / KAPPA) * YN
    safe_v = np.where(v_prime != 0, v_prime, 1.0)
    x = np.where(v_prime != 0, y * 9 * u_prime / (4 * safe_v), 0.0)
    z = np.where(v_prime != 0, y * (12 - 3 * u_prime - 20 * v_prime) / (4 * safe_v), 0.0)

    xyz = _stack(
        np.where(positive, x, 0.0),
        np.where(positive, y, 0.0),
        np.where(positive, z, 0.0),
    )
    return xyz_to_rgb8(xyz)


# =============================================================================
# HSV / HSL
# =============================================================================

def _hue_degrees(r, g, b, cmax, delta):
    safe_delta = np.where(delta > 0, delta, 1.0)
    hue = np.where(
        cmax == r,
        ((g - b) / safe_delta) % 6,
        np.where(cmax == g, (b - r) / safe_delta + 2, (r - g) / safe_delta + 4),
    )
    return np.where(delta > 0, hue * 60.0, 0.0) % 360.0


def rgb_to_hsv(rgb: np.ndarray) -> np.ndarray:
    """Convert RGB (0-255) to HSV with hue in degrees, S and V in [0, 1]."""
    rgb_norm = _as_float(rgb) / 255.0
    r, g, b = rgb_norm[..., 0], rgb_norm[..., 1], rgb_norm[..., 2]
    cmax = rgb_norm.max(axis=-1)
    cmin = rgb_norm.min(axis=-1)
    delta = cmax - cmin

    hue = _hue_degrees(r, g, b, cmax, delta)
    sat = np.where(cmax > 0, delta / np.where(cmax > 0, cmax, 1.0), 0.0)
    return _stack(hue, sat, cmax)


def rgb_to_hsl(rgb: np.ndarray) -> np.ndarray:
    """Convert RGB (0-255) to HSL with hue in degrees, S and L in [0, 1]."""
    rgb_norm = _as_float(rgb) / 255.0
    r, g, b = rgb_norm[..., 0], rgb_norm[..., 1], rgb_norm[..., 2]
    cmax = rgb_norm.max(axis=-1)
    cmin = rgb_norm.min(axis=-1)
    delta = cmax - cmin

    hue = _hue_degrees(r, g, b, cmax, delta)
    lightness = (cmax + cmin) / 2
    denom = 1 - np.abs(2 * lightness - 1)
    sat = np.where(denom > 0, delta / np.where(denom > 0, denom, 1.0), 0.0)
    return _stack(hue, np.clip(sat, 0.0, 1.0), lightness)


def _sector_rgb(hue, chroma, x, m):
    """Rebuild RGB from the hue sector, chroma, secondary component and offset."""
    sector = np.floor(hue / 60.0).astype(int) % 6
    zero = np.zeros_like(chroma)
    r = np.choose(sector, [chroma, x, zero, zero, x, chroma])
    g = np.choose(sector, [x, chroma, chroma, x, zero, zero])
    b = np.choose(sector, [zero, zero, x, chroma, chroma, x])
    return quantize_rgb(_stack(r + m, g + m, b + m) * 255)


def hsv_to_rgb8(hsv: np.ndarray) -> np.ndarray:
    """Convert HSV (hue in degrees) to canonical 8-bit RGB."""
    hsv = _as_float(hsv)
    hue = hsv[..., 0] % 360.0
    sat = np.clip(hsv[..., 1], 0.0, 1.0)
    val = np.clip(hsv[..., 2], 0.0, 1.0)

    chroma = val * sat
    x = chroma * (1 - np.abs((hue / 60.0) % 2 - 1))
    return _sector_rgb(hue, chroma, x, val - chroma)


def hsl_to_rgb8(hsl: np.ndarray) -> np.ndarray:
    """Convert HSL (hue in degrees) to canonical 8-bit RGB."""
    hsl = _as_float(hsl)
    hue = hsl[..., 0] % 360.0
    sat = np.clip(hsl[..., 1], 0.0, 1.0)
    lightness = np.clip(hsl[..., 2], 0.0, 1.0)

    chroma = (1 - np.abs(2 * lightness - 1)) * sat
    x = chroma * (1 - np.abs((hue / 60.0) % 2 - 1))
    return _sector_rgb(hue, chroma, x, lightness - chroma / 2)


# =============================================================================
# YUV / RGB passthrough
# =============================================================================

def rgb_to_yuv(rgb: np.ndarray) -> np.ndarray:
    """Convert RGB (0-255) to BT.601 YUV on a [0, 1] luma scale."""
    return (_as_float(rgb) / 255.0) @ RGB_TO_YUV.T


def yuv_to_rgb8(yuv: np.ndarray) -> np.ndarray:
    return quantize_rgb((_as_float(yuv) @ YUV_TO_RGB.T) * 255)


def rgb_to_float(rgb: np.ndarray) -> np.ndarray:
    return _as_float(rgb)


def float_to_rgb8(rgb: np.ndarray) -> np.ndarray:
    return quantize_rgb(rgb)


# =============================================================================
# Contrast, distance, formatting
# =============================================================================

def relative_luminance(lab: np.ndarray) -> np.ndarray:
    """WCAG relative luminance of a LAB color via clipped linear RGB."""
    rgb_linear = np.clip(xyz_to_linear_rgb(lab_to_xyz(lab)), 0.0, 1.0)
    return rgb_linear @ LUMINANCE_WEIGHTS


def contrast_ratio(lab1: np.ndarray, lab2: np.ndarray) -> float:
    """
    Compute WCAG contrast ratio between two LAB colors.

    Symmetric, always within [1, 21].
    """
    l1 = float(relative_luminance(lab1))
    l2 = float(relative_luminance(lab2))
    lighter = max(l1, l2)
    darker = min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def delta_e_cie76(lab1: np.ndarray, lab2: np.ndarray) -> float:
    """Euclidean distance in LAB space."""
    return float(np.linalg.norm(_as_float(lab1) - _as_float(lab2)))


def rgb_to_hex(rgb) -> str:
    r, g, b = (int(c) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def lab_to_hex(lab: np.ndarray) -> str:
    """Convert LAB to hex string."""
    return rgb_to_hex(lab_to_rgb8(lab))


# =============================================================================
# Working color spaces
# =============================================================================

class ColorSpace(Enum):
    """Coordinate system used for clustering distance."""
    RGB = 'RGB'
    HSL = 'HSL'
    HSV = 'HSV'
    YUV = 'YUV'
    LAB = 'CIELAB'
    LUV = 'CIELUV'

    @classmethod
    def from_name(cls, name: str) -> 'ColorSpace':
        """Resolve a user-supplied name (case-insensitive, LAB/LUV aliases)."""
        key = name.strip().upper()
        if key in _ALIASES:
            return _ALIASES[key]
        raise ValueError(f"Unsupported color space: {name}")

    @property
    def to_working(self):
        """RGB (0-255) -> working-space coordinates."""
        return _CONVERTERS[self][0]

    @property
    def from_working(self):
        """Working-space coordinates -> canonical RGB8."""
        return _CONVERTERS[self][1]


_ALIASES = {
    'RGB': ColorSpace.RGB,
    'HSL': ColorSpace.HSL,
    'HSV': ColorSpace.HSV,
    'YUV': ColorSpace.YUV,
    'CIELAB': ColorSpace.LAB,
    'LAB': ColorSpace.LAB,
    'CIELUV': ColorSpace.LUV,
    'LUV': ColorSpace.LUV,
}

_CONVERTERS = {
    ColorSpace.RGB: (rgb_to_float, float_to_rgb8),
    ColorSpace.HSL: (rgb_to_hsl, hsl_to_rgb8),
    ColorSpace.HSV: (rgb_to_hsv, hsv_to_rgb8),
    ColorSpace.YUV: (rgb_to_yuv, yuv_to_rgb8),
    ColorSpace.LAB: (rgb_to_lab, lab_to_rgb8),
    ColorSpace.LUV: (rgb_to_luv, luv_to_rgb8),
}
