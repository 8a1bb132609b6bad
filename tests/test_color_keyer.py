import pytest

from color_keyer import (
    MIN_TOLERANCE,
    KeyingMethod,
    KeyingParameters,
    RGBColor,
    adaptive_alpha,
    calculate_alpha,
    chroma_alpha,
    distance,
    distance_alpha,
    effective_tolerance,
    evaluate,
    evaluate_row,
    luma_weighted_alpha,
)

GREEN = RGBColor(0.0, 1.0, 0.0)


def test_distance_is_euclidean():
    assert distance(RGBColor(0, 0, 0), RGBColor(1, 1, 1)) == pytest.approx(3 ** 0.5)
    assert distance(RGBColor(0.2, 0.4, 0.6), RGBColor(0.2, 0.4, 0.6)) == 0.0
    # out-of-range channels are not clamped
    assert distance(RGBColor(2.0, 0, 0), RGBColor(-1.0, 0, 0)) == pytest.approx(3.0)


def test_effective_tolerance_without_weights_is_base():
    assert effective_tolerance(RGBColor(0.3, 0.6, 0.9), 0.3) == pytest.approx(0.3)


def test_effective_tolerance_uses_pixel_hue_matches():
    p = RGBColor(0.8, 0.6, 0.2)
    # yellow=min(r,g)=0.6, magenta=min(r,b)=0.2, cyan=min(g,b)=0.2
    tol = effective_tolerance(p, 0.3, red=1.0, green=-1.0, blue=2.0,
                              yellow=1.0, magenta=-2.0, cyan=3.0)
    expected = 0.3 + 0.1 * (1.0 * 0.8 - 1.0 * 0.6 + 2.0 * 0.2 + 1.0 * 0.6 - 2.0 * 0.2 + 3.0 * 0.2)
    assert tol == pytest.approx(expected)


def test_effective_tolerance_ignores_key_color():
    # only the pixel drives expansion
    p = RGBColor(0.0, 1.0, 0.0)
    assert effective_tolerance(p, 0.3, green=1.0) == pytest.approx(0.4)
    assert effective_tolerance(RGBColor(1.0, 0.0, 0.0), 0.3, green=1.0) == pytest.approx(0.3)


def test_effective_tolerance_floor():
    p = RGBColor(1.0, 1.0, 1.0)
    assert effective_tolerance(p, 0.3, red=-3, green=-3, blue=-3) == MIN_TOLERANCE
    assert effective_tolerance(p, -1.0) == MIN_TOLERANCE


def test_key_color_is_fully_opaque():
    params = KeyingParameters(key_color=GREEN)
    assert evaluate(GREEN, params) == 1.0


@pytest.mark.parametrize("pixel, expected", [
    ((0.0, 1.0, 0.0), 1.0),
    ((0.0, 0.5, 0.0), 0.0),
    ((0.0, 0.85, 0.0), 0.5),
])
def test_distance_end_to_end(pixel, expected):
    params = KeyingParameters(key_color=GREEN, tolerance=0.3)
    assert evaluate(RGBColor(*pixel), params) == pytest.approx(expected)


def test_distance_falloff_is_monotonic_and_hits_zero():
    params = KeyingParameters(key_color=GREEN, tolerance=0.3)
    greens = [1.0, 0.95, 0.9, 0.85, 0.8, 0.75]
    alphas = [evaluate(RGBColor(0.0, g, 0.0), params) for g in greens]
    assert alphas == sorted(alphas, reverse=True)
    assert len(set(alphas)) == len(alphas)

    # distance == tolerance: pixel one tolerance away along blue
    assert evaluate(RGBColor(0.0, 1.0, 0.3), params) == pytest.approx(0.0, abs=1e-9)
    for b in (0.35, 0.5, 1.0):
        assert evaluate(RGBColor(0.0, 1.0, b), params) == 0.0


def test_green_direction_weight_sign():
    key = RGBColor(0.0, 0.0, 0.0)
    pixel = RGBColor(0.0, 1.0, 0.0)
    base = KeyingParameters(key_color=key, tolerance=1.2)
    wider = KeyingParameters(key_color=key, tolerance=1.2, green=3.0)
    narrower = KeyingParameters(key_color=key, tolerance=1.2, green=-3.0)

    assert effective_tolerance(pixel, 1.2, green=3.0) > effective_tolerance(pixel, 1.2)
    assert evaluate(pixel, wider) > evaluate(pixel, base)
    assert evaluate(pixel, narrower) < evaluate(pixel, base)


def test_gain_output_is_clamped():
    pixel = RGBColor(0.0, 0.9, 0.0)
    for gain in (0.0, 0.5, 1.0, 2.5, 5.0, 100.0):
        params = KeyingParameters(key_color=GREEN, gain=gain)
        assert 0.0 <= evaluate(pixel, params) <= 1.0
    assert evaluate(pixel, KeyingParameters(key_color=GREEN, gain=5.0)) == 1.0


def test_negative_gain_clamps_to_zero():
    params = KeyingParameters(key_color=GREEN, gain=-2.0)
    assert evaluate(GREEN, params) == 0.0


@pytest.mark.parametrize("method", list(KeyingMethod))
def test_invert_complements(method):
    pixel = RGBColor(0.1, 0.8, 0.2)
    plain = KeyingParameters(key_color=GREEN, method=method, gain=1.5)
    inverted = KeyingParameters(key_color=GREEN, method=method, gain=1.5, invert=True)
    assert evaluate(pixel, inverted) == pytest.approx(1.0 - evaluate(pixel, plain))


def test_chroma_ignores_luma_shift():
    params = KeyingParameters(key_color=GREEN, tolerance=0.6, method=KeyingMethod.Chroma)
    # uniform offsets leave r-g and b-g unchanged
    for offset in (-0.4, -0.2, 0.0, 0.1):
        shifted = RGBColor(0.1 + offset, 0.9 + offset, 0.1 + offset)
        assert calculate_alpha(shifted, params) == pytest.approx(
            calculate_alpha(RGBColor(0.1, 0.9, 0.1), params))


def test_chroma_ignores_direction_weights():
    pixel = RGBColor(0.2, 0.7, 0.1)
    plain = KeyingParameters(key_color=GREEN, method=KeyingMethod.Chroma)
    weighted = KeyingParameters(key_color=GREEN, method=KeyingMethod.Chroma,
                                green=3.0, yellow=-2.0, cyan=1.0)
    assert evaluate(pixel, plain) == evaluate(pixel, weighted)


def test_chroma_zero_tolerance_uses_floor():
    params = KeyingParameters(key_color=GREEN, tolerance=0.0)
    assert chroma_alpha(GREEN, GREEN, params) == 1.0
    assert chroma_alpha(RGBColor(1.0, 0.0, 0.0), GREEN, params) == 0.0


def test_luma_weighted_drops_with_luma_difference():
    key = RGBColor(0.0, 0.6, 0.0)
    params = KeyingParameters(key_color=key, tolerance=1.0, method=KeyingMethod.LumaWeighted)
    alphas = [calculate_alpha(RGBColor(0.0, g, 0.0), params) for g in (0.6, 0.5, 0.4, 0.3)]
    assert alphas[0] == pytest.approx(1.0)
    assert alphas == sorted(alphas, reverse=True)
    assert len(set(alphas)) == len(alphas)


def test_luma_weighted_is_distance_times_weight():
    key = GREEN
    pixel = RGBColor(0.0, 0.8, 0.0)
    params = KeyingParameters(key_color=key, tolerance=0.5, green=1.0)
    luma_diff = 0.587 * 0.2
    expected = distance_alpha(pixel, key, params) * (1.0 - luma_diff / 0.5)
    assert luma_weighted_alpha(pixel, key, params) == pytest.approx(expected)


def test_luma_weight_zero_beyond_half():
    params = KeyingParameters(key_color=RGBColor(1.0, 1.0, 1.0), tolerance=2.0)
    assert luma_weighted_alpha(RGBColor(0.2, 0.2, 0.2), params.key_color, params) == 0.0


def test_chroma_stays_while_luma_weighted_falls():
    key = RGBColor(0.2, 0.7, 0.2)
    chroma = KeyingParameters(key_color=key, tolerance=0.5, method=KeyingMethod.Chroma)
    luma_w = KeyingParameters(key_color=key, tolerance=0.5, method=KeyingMethod.LumaWeighted)

    chroma_alphas = []
    luma_alphas = []
    for shift in (0.0, 0.05, 0.1, 0.15):
        pixel = RGBColor(key.r - shift, key.g - shift, key.b - shift)
        chroma_alphas.append(calculate_alpha(pixel, chroma))
        luma_alphas.append(calculate_alpha(pixel, luma_w))

    assert chroma_alphas == pytest.approx([1.0] * 4)
    assert luma_alphas == sorted(luma_alphas, reverse=True)
    assert luma_alphas[-1] < luma_alphas[0]


def test_adaptive_saturated_key_prefers_chroma():
    key = GREEN
    pixel = RGBColor(0.1, 0.8, 0.2)
    params = KeyingParameters(key_color=key, tolerance=0.5, method=KeyingMethod.Adaptive)
    d = distance_alpha(pixel, key, params)
    c = chroma_alpha(pixel, key, params)
    assert adaptive_alpha(pixel, key, params) == pytest.approx(0.3 * d + 0.7 * c)
    assert calculate_alpha(pixel, params) == pytest.approx(0.3 * d + 0.7 * c)


def test_adaptive_desaturated_key_prefers_distance():
    key = RGBColor(0.5, 0.6, 0.5)
    pixel = RGBColor(0.45, 0.7, 0.5)
    params = KeyingParameters(key_color=key, tolerance=0.5, method=KeyingMethod.Adaptive)
    d = distance_alpha(pixel, key, params)
    c = chroma_alpha(pixel, key, params)
    assert d != c
    assert calculate_alpha(pixel, params) == pytest.approx(0.7 * d + 0.3 * c)


def test_evaluate_is_pure():
    params = KeyingParameters(key_color=GREEN, method=KeyingMethod.Adaptive,
                              red=0.5, yellow=-1.0, gain=1.3)
    pixels = [RGBColor(0.1, 0.7, 0.3), RGBColor(0.9, 0.2, 0.1), RGBColor(0.0, 0.95, 0.05)]
    first = evaluate_row(pixels, params)
    # reversed call order must not matter
    reversed_run = [evaluate(p, params) for p in reversed(pixels)]
    assert evaluate_row(pixels, params) == first
    assert list(reversed(reversed_run)) == first


def test_plain_tuples_are_accepted():
    params = KeyingParameters(key_color=(0, 1, 0))
    assert params.key_color == GREEN
    assert evaluate((0.0, 0.85, 0.0), params) == pytest.approx(0.5)


def test_method_coercion():
    assert KeyingParameters(method=2).method is KeyingMethod.LumaWeighted
    assert KeyingParameters(method="Adaptive").method is KeyingMethod.Adaptive


@pytest.mark.parametrize("bad", [4, -1, "Magic"])
def test_unknown_method_rejected(bad):
    with pytest.raises(ValueError):
        KeyingParameters(method=bad)


def test_unknown_method_at_dispatch():
    params = KeyingParameters()
    object.__setattr__(params, "method", 7)
    with pytest.raises(ValueError, match="Unknown keying method"):
        evaluate(GREEN, params)


def test_parameters_are_frozen():
    params = KeyingParameters()
    with pytest.raises(AttributeError):
        params.gain = 2.0


@pytest.mark.parametrize("bad", ["#00FF00", (0.0, 1.0), None, ("a", "b", "c")])
def test_key_color_must_be_a_triple(bad):
    with pytest.raises(ValueError, match="Key color"):
        KeyingParameters(key_color=bad)
