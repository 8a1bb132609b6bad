"""
Simple Color Keyer engine.

Turns a pixel's RGB value and a key color into an alpha value
(0 = keyed out, 1 = opaque). Every function here is pure: no state is kept
between pixels, so hosts may call evaluate() from any thread.
"""
import math
from dataclasses import dataclass
from enum import IntEnum
from typing import NamedTuple

# --- Policy constants ---
DIRECTION_SCALE = 0.1       # weight -> tolerance units
MIN_TOLERANCE = 0.001
LUMA_FALLOFF = 0.5          # luma difference at which the weight hits zero
SATURATION_THRESHOLD = 0.5

# Rec.601 luma coefficients
LUMA_COEFF_R = 0.299
LUMA_COEFF_G = 0.587
LUMA_COEFF_B = 0.114

DIRECTIONS = ("red", "green", "blue", "yellow", "magenta", "cyan")

# ==========================================
# COLOR MODEL
# ==========================================

class RGBColor(NamedTuple):
    r: float
    g: float
    b: float


def distance(a, b):
    """Euclidean distance between two RGB colors."""
    dr = a.r - b.r
    dg = a.g - b.g
    db = a.b - b.b
    return math.sqrt(dr*dr + dg*dg + db*db)


class KeyingMethod(IntEnum):
    # Values follow the node's menu order
    Distance = 0
    Chroma = 1
    LumaWeighted = 2
    Adaptive = 3


@dataclass(frozen=True)
class KeyingParameters:
    """
    Read-only settings snapshot consumed by evaluate().

    Range validation is the host's job (see keyer_params.build_parameters);
    only `method` is checked here so an unknown method can never reach
    dispatch.
    """
    key_color: RGBColor = RGBColor(0.0, 1.0, 0.0)
    tolerance: float = 0.3
    red: float = 0.0
    green: float = 0.0
    blue: float = 0.0
    yellow: float = 0.0
    magenta: float = 0.0
    cyan: float = 0.0
    gain: float = 1.0
    invert: bool = False
    method: KeyingMethod = KeyingMethod.Distance

    def __post_init__(self):
        object.__setattr__(self, "key_color", _coerce_color(self.key_color))
        object.__setattr__(self, "method", _coerce_method(self.method))

    @property
    def direction_weights(self):
        return tuple(getattr(self, name) for name in DIRECTIONS)


def _coerce_color(color):
    # Hex strings and names are parsed by keyer_params.parse_key_color
    if isinstance(color, str):
        raise ValueError(f"Key color must be an (r, g, b) triple, got {color!r}")
    try:
        r, g, b = color
        return RGBColor(float(r), float(g), float(b))
    except (TypeError, ValueError):
        raise ValueError(f"Key color must be an (r, g, b) triple, got {color!r}") from None


def _coerce_method(method):
    if isinstance(method, str):
        try:
            return KeyingMethod[method]
        except KeyError:
            raise ValueError(f"Unknown keying method: {method!r}") from None
    try:
        return KeyingMethod(method)
    except ValueError:
        raise ValueError(f"Unknown keying method: {method!r}") from None

# ==========================================
# TOLERANCE EXPANSION
# ==========================================

def direction_matches(pixel):
    """How strongly the pixel exhibits each hue direction, in DIRECTIONS order."""
    r, g, b = pixel
    return (r, g, b, min(r, g), min(r, b), min(g, b))


def effective_tolerance(pixel, tolerance, red=0.0, green=0.0, blue=0.0,
                        yellow=0.0, magenta=0.0, cyan=0.0):
    """
    Base tolerance nudged along six hue axes.

    Positive weights widen the tolerance for pixels rich in that hue,
    negative weights narrow it. The result never drops below MIN_TOLERANCE.
    """
    weights = (red, green, blue, yellow, magenta, cyan)
    tol = tolerance
    for weight, match in zip(weights, direction_matches(pixel)):
        tol += weight * DIRECTION_SCALE * match
    return max(MIN_TOLERANCE, tol)


def tolerance_for(pixel, params):
    return effective_tolerance(pixel, params.tolerance, *params.direction_weights)

# ==========================================
# ALPHA ESTIMATORS
# ==========================================

def distance_alpha(pixel, key, params):
    tol = tolerance_for(pixel, params)
    return max(0.0, 1.0 - distance(pixel, key) / tol)


def chroma_alpha(pixel, key, params):
    # r-g / b-g projection drops luminance; direction weights do not apply
    pixel_u = pixel.r - pixel.g
    pixel_v = pixel.b - pixel.g
    key_u = key.r - key.g
    key_v = key.b - key.g

    du = pixel_u - key_u
    dv = pixel_v - key_v
    chroma_distance = math.sqrt(du*du + dv*dv)
    tol = max(MIN_TOLERANCE, params.tolerance)
    return max(0.0, 1.0 - chroma_distance / tol)


def luma(color):
    return LUMA_COEFF_R * color.r + LUMA_COEFF_G * color.g + LUMA_COEFF_B * color.b


def luma_weighted_alpha(pixel, key, params):
    luma_diff = abs(luma(pixel) - luma(key))
    luma_weight = 1.0 - min(1.0, luma_diff / LUMA_FALLOFF)
    return distance_alpha(pixel, key, params) * luma_weight


def saturation(color):
    return max(color) - min(color)


def adaptive_alpha(pixel, key, params):
    d_alpha = distance_alpha(pixel, key, params)
    c_alpha = chroma_alpha(pixel, key, params)

    if saturation(key) > SATURATION_THRESHOLD:
        # Saturated screens key more reliably on chroma
        return 0.3 * d_alpha + 0.7 * c_alpha
    return 0.7 * d_alpha + 0.3 * c_alpha


ESTIMATORS = {
    KeyingMethod.Distance: distance_alpha,
    KeyingMethod.Chroma: chroma_alpha,
    KeyingMethod.LumaWeighted: luma_weighted_alpha,
    KeyingMethod.Adaptive: adaptive_alpha,
}

# ==========================================
# KEYING ENGINE
# ==========================================

def calculate_alpha(pixel, params):
    """Raw estimator output for `pixel`, before gain, clamp and invert."""
    try:
        estimator = ESTIMATORS[params.method]
    except KeyError:
        raise ValueError(f"Unknown keying method: {params.method!r}") from None
    return estimator(RGBColor(*pixel), params.key_color, params)


def evaluate(pixel, params):
    """Final alpha in [0, 1] for one pixel."""
    alpha = calculate_alpha(pixel, params) * params.gain
    alpha = max(0.0, min(1.0, alpha))
    if params.invert:
        alpha = 1.0 - alpha
    return alpha


def evaluate_row(pixels, params):
    return [evaluate(p, params) for p in pixels]
