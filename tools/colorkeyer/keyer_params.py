"""
Knob declarations for the Simple Color Keyer and host-side validation.

The engine trusts its KeyingParameters; this module is where UI or command
line values get clamped to the ranges the node declares.
"""
from PIL import ImageColor

from color_keyer import DIRECTIONS, KeyingMethod, KeyingParameters, RGBColor

METHOD_LABELS = {
    KeyingMethod.Distance: "Distance",
    KeyingMethod.Chroma: "Chroma",
    KeyingMethod.LumaWeighted: "Luma Weighted",
    KeyingMethod.Adaptive: "Adaptive",
}

PARAMS = {
    "key_color": {
        "type": "color",
        "min": 0.0,
        "max": 1.0,
        "default": "#00FF00",
        "label": "Key Color",
        "description": "The base color to key out. Use the color picker to select.",
    },
    "tolerance": {
        "type": "float",
        "min": 0.001,
        "max": 2.0,
        "default": 0.3,
        "label": "Tolerance",
        "description": "Overall color matching tolerance. Lower values = more precise keying.",
    },
    "method": {
        "type": "choice",
        "choices": list(METHOD_LABELS.values()),
        "default": "Distance",
        "label": "Keying Method",
        "description": "Distance: Standard RGB distance (works with color expansion)\n"
                       "Chroma: Ignores brightness changes\n"
                       "Luma Weighted: Considers brightness similarity\n"
                       "Adaptive: Automatically chooses best method",
    },
    "gain": {
        "type": "float",
        "min": 0.0,
        "max": 5.0,
        "default": 1.0,
        "label": "Gain",
        "description": "Alpha contrast adjustment. >1.0 increases contrast.",
    },
    "invert": {
        "type": "bool",
        "default": False,
        "label": "Invert",
        "description": "Invert the generated matte.",
    },
}

for _name in DIRECTIONS:
    PARAMS[_name] = {
        "type": "float",
        "min": -3.0,
        "max": 3.0,
        "default": 0.0,
        "label": _name.capitalize(),
        "description": f"Expand keying toward {_name} (+) or away from {_name} (-). Range: -3 to +3",
    }
del _name

NODE_HELP = """\
Simple Color Keyer with 6-Direction Color Control

Workflow:
  1. Pick your base key color
  2. Set overall tolerance for the base matching
  3. Use the 6-direction controls (-3 to +3) for precise expansion

Primary colors:   red, green, blue
Secondary colors: yellow (red+green), magenta (red+blue), cyan (green+blue)

Positive values expand keying TOWARD that color, negative values contract
keying AWAY from it.

Examples:
  Green screen with yellow spill:  --green 1.5 --yellow 1.0
  Blue screen with cyan cast:      --blue 2.0 --cyan 1.0
  Red object, avoid orange:        --red 1.0 --yellow -0.5
  Skin tone, warm variant:         --red 0.8 --magenta 0.3 --yellow 0.5

Keying methods:
  Distance       works with color expansion (recommended)
  Chroma         ignores brightness changes
  Luma Weighted  considers brightness similarity
  Adaptive       blends distance and chroma based on key saturation
"""


def default_value(name):
    return PARAMS[name]["default"]


def clamp_param(name, value):
    spec = PARAMS.get(name)
    if spec is None or spec["type"] != "float":
        raise ValueError(f"Not a numeric parameter: {name!r}")
    return max(spec["min"], min(spec["max"], float(value)))


def clamp_color(color):
    """Clamp each channel of a key color to the knob's [0, 1] range."""
    spec = PARAMS["key_color"]
    return RGBColor(*(max(spec["min"], min(spec["max"], c)) for c in color))


def parse_key_color(text):
    """
    Parse a key color.

    Accepts anything PIL.ImageColor understands ("#00FF00", "green",
    "rgb(0,255,0)") or three comma separated floats in [0, 1] ("0,1,0").
    """
    if isinstance(text, (tuple, list)):
        return RGBColor(*(float(c) for c in text))

    parts = [p.strip() for p in str(text).split(",")]
    if len(parts) == 3:
        try:
            return RGBColor(*(float(p) for p in parts))
        except ValueError:
            pass  # not plain floats, let ImageColor try

    try:
        rgb = ImageColor.getrgb(str(text).strip())
    except ValueError:
        raise ValueError(f"Unrecognized key color: {text!r}") from None
    return RGBColor(rgb[0] / 255.0, rgb[1] / 255.0, rgb[2] / 255.0)


def _normalize_label(label):
    return label.replace(" ", "").replace("_", "").lower()


def parse_method(value):
    if isinstance(value, KeyingMethod):
        return value
    if isinstance(value, int):
        try:
            return KeyingMethod(value)
        except ValueError:
            raise ValueError(f"Unknown keying method index: {value}") from None

    wanted = _normalize_label(str(value))
    if wanted.isdigit():
        return parse_method(int(wanted))
    for method in KeyingMethod:
        if _normalize_label(method.name) == wanted:
            return method
    raise ValueError(f"Unknown keying method: {value!r}")


def method_label(method):
    return METHOD_LABELS[parse_method(method)]


def build_parameters(**values):
    """
    Build KeyingParameters from raw host values, clamping every numeric
    knob and each key color channel to its declared range. Missing knobs
    take their defaults.
    """
    unknown = set(values) - set(PARAMS)
    if unknown:
        raise ValueError(f"Unknown parameter(s): {', '.join(sorted(unknown))}")

    merged = {name: spec["default"] for name, spec in PARAMS.items()}
    merged.update(values)

    kwargs = {}
    for name, spec in PARAMS.items():
        value = merged[name]
        if spec["type"] == "float":
            kwargs[name] = clamp_param(name, value)
        elif spec["type"] == "bool":
            kwargs[name] = bool(value)

    return KeyingParameters(
        key_color=clamp_color(parse_key_color(merged["key_color"])),
        method=parse_method(merged["method"]),
        **kwargs,
    )
