import argparse
import sys
from PIL import Image

from color_keyer import DIRECTIONS
from keyer_host import key_image
from keyer_params import NODE_HELP, PARAMS, build_parameters, default_value, method_label


def build_parser():
    parser = argparse.ArgumentParser(
        prog="color-keyer",
        description="Simple Color Keyer (6-direction color control)",
        epilog=NODE_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("input", help="Input image path")
    parser.add_argument("output", help="Output image path (PNG keeps the alpha)")

    parser.add_argument("-c", "--color", default=default_value("key_color"),
                        help="Key color, hex (#00FF00), a color name, or 0-1 floats (0,1,0). Default Green.")
    parser.add_argument("-t", "--tolerance", type=float, default=default_value("tolerance"),
                        help=PARAMS["tolerance"]["description"])
    parser.add_argument("-m", "--method", default=default_value("method"),
                        help="Distance, Chroma, \"Luma Weighted\" or Adaptive (or 0-3)")
    parser.add_argument("--gain", type=float, default=default_value("gain"),
                        help=PARAMS["gain"]["description"])

    group = parser.add_argument_group("6-direction color expansion (-3 to +3)")
    for name in DIRECTIONS:
        group.add_argument(f"--{name}", type=float, default=default_value(name),
                           help=PARAMS[name]["description"])

    parser.add_argument("--mask-only", action="store_true", help="Output grayscale mask only")
    parser.add_argument("--invert", action="store_true", help="Invert the final mask")
    return parser


def params_from_args(args):
    directions = {name: getattr(args, name) for name in DIRECTIONS}
    return build_parameters(
        key_color=args.color,
        tolerance=args.tolerance,
        method=args.method,
        gain=args.gain,
        invert=args.invert,
        **directions,
    )


def report_progress(rows_done, height):
    # Roughly every 25% of the rows
    step = max(1, height // 4)
    if rows_done % step == 0 or rows_done == height:
        print(f"  {rows_done}/{height} rows ({100 * rows_done // height}%)")


def process_colorkey(args):
    try:
        params = params_from_args(args)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    print(f"Opening {args.input}...")
    try:
        img = Image.open(args.input)
        img.load()
    except OSError as e:
        print(f"Error: {e}")
        return 1

    width, height = img.size
    print(f"Processing {width}x{height} pixels with {method_label(params.method)} keying. Please wait...")
    result = key_image(img, params, mask_only=args.mask_only, progress=report_progress)

    print(f"Saving to {args.output}...")
    try:
        result.save(args.output)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    print("Done.")
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    return process_colorkey(args)


if __name__ == "__main__":
    sys.exit(main())
