"""
Pillow host for the keying engine: feeds scanlines to color_keyer.evaluate,
passes RGB through untouched and writes the alpha channel.
"""
from PIL import Image

from color_keyer import RGBColor, evaluate


def pixel_from_rgb255(r, g, b):
    return RGBColor(r / 255.0, g / 255.0, b / 255.0)


def alpha_to_255(alpha):
    return int(round(alpha * 255))


def key_row(row, params):
    """
    Key one scanline of 8-bit (r, g, b) or (r, g, b, a) tuples.
    Returns RGBA tuples; any incoming alpha is replaced by the matte.
    """
    out = []
    for px in row:
        r, g, b = px[0], px[1], px[2]
        alpha = evaluate(pixel_from_rgb255(r, g, b), params)
        out.append((r, g, b, alpha_to_255(alpha)))
    return out


def key_image(img, params, mask_only=False, progress=None):
    """
    Key a whole image and return a new one.

    RGBA output with the source RGB, or an "L" matte when mask_only is set.
    `progress`, if given, is called with (rows_done, height) after each row.
    """
    src = img.convert("RGB")
    width, height = src.size
    pixels = src.load()

    out = Image.new("L" if mask_only else "RGBA", (width, height))
    out_pixels = out.load()

    # Alpha depends only on the RGB triple, so repeats within a frame are free
    alpha_for = {}

    for y in range(height):
        for x in range(width):
            rgb = pixels[x, y]
            a = alpha_for.get(rgb)
            if a is None:
                a = alpha_to_255(evaluate(pixel_from_rgb255(*rgb), params))
                alpha_for[rgb] = a

            if mask_only:
                out_pixels[x, y] = a
            else:
                out_pixels[x, y] = (rgb[0], rgb[1], rgb[2], a)

        if progress is not None:
            progress(y + 1, height)

    return out


def matte_image(img, params):
    return key_image(img, params, mask_only=True)
