import math

import pytest

from springanim.core.animation import (
    Keyframe,
    STANDARD_PREFIXES,
    animation_duration_ms,
    as_css_statement,
    format_number,
    generate_animation_css,
    generate_css_keyframes,
    identity_mapper,
    quantize,
    round_to,
    rule,
)


class TestNumbers:
    @pytest.mark.parametrize("value, expected", [
        (0.0, "0"),
        (-0.0, "0"),
        (50.0, "50"),
        (100, "100"),
        (33.33333, "33.33333"),
        (0.1, "0.1"),
        (-2.5, "-2.5"),
        (1e-05, "0.00001"),
    ])
    def test_format_number(self, value, expected):
        assert format_number(value) == expected

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_format_rejects_non_finite(self, value):
        with pytest.raises(ValueError):
            format_number(value)

    def test_round_to_half_up(self):
        assert round_to(33.333333333, 5) == 33.33333
        assert round_to(66.666666666, 5) == 66.66667
        assert round_to(0.5, 0) == 1
        assert round_to(-0.5, 0) == 0

    def test_duration(self):
        assert animation_duration_ms(60, 60) == 1000
        assert animation_duration_ms(30, 60) == 500
        assert animation_duration_ms(1, 60) == 0
        assert animation_duration_ms(0, 60) == 0

    def test_duration_rejects_bad_fps(self):
        with pytest.raises(ValueError):
            animation_duration_ms(10, 0)


class TestQuantize:
    def test_three_samples(self):
        frames = quantize([0.5, 0.2, 0.05], identity_mapper)

        assert [f.percent for f in frames] == [0, 50, 100]
        assert [f.value for f in frames] == ["0.5", "0.2", "0.05"]

    def test_thirds_are_rounded(self):
        frames = quantize([4, 3, 2, 1], identity_mapper)
        assert [f.percent for f in frames] == [0, 33.33333, 66.66667, 100]

    @pytest.mark.parametrize("n", [2, 7, 106, 577])
    def test_spans_zero_to_hundred(self, n):
        frames = quantize([float(i) for i in range(n)], identity_mapper)
        percents = [f.percent for f in frames]

        assert len(frames) == n
        assert percents[0] == 0
        assert percents[-1] == pytest.approx(100, abs=1e-5)
        assert all(a < b for a, b in zip(percents, percents[1:]))

    def test_single_sample_is_one_final_frame(self):
        assert quantize([3.0], identity_mapper) == [Keyframe(100.0, "3")]

    def test_empty_curve_rejected(self):
        with pytest.raises(ValueError):
            quantize([], identity_mapper)

    def test_mapper_called_per_sample_in_order(self):
        seen = []

        def mapper(x):
            seen.append(x)
            return f"x:{x};"

        quantize([3.0, 2.0, 1.0], mapper)
        assert seen == [3.0, 2.0, 1.0]


class TestSerialization:
    def test_rule_repeats_per_prefix(self):
        assert rule("animation-name", "bounce", ("-moz-", "")) == (
            "-moz-animation-name:bounce;animation-name:bounce;"
        )

    def test_statement(self):
        assert as_css_statement(".a", "b:c;") == ".a{b:c;}"

    def test_prefixes_must_be_a_sequence(self):
        with pytest.raises(TypeError):
            rule("a", "b", "-moz-")

    def test_prefixes_must_not_be_empty(self):
        with pytest.raises(ValueError):
            rule("a", "b", [])

    def test_keyframes_block(self):
        css = generate_css_keyframes([0.5, 0.2, 0.05], "anim-test", identity_mapper)
        assert css == "@keyframes anim-test {0%{0.5}50%{0.2}100%{0.05}}"

    def test_animation_css_default_prefix(self):
        css = generate_animation_css([0.5, 0.2, 0.05], "anim-test", 50, identity_mapper)

        assert css == (
            "@keyframes anim-test {0%{0.5}50%{0.2}100%{0.05}}"
            ".anim-test{"
            "animation-duration:50ms;"
            "animation-name:anim-test;"
            "animation-timing-function:linear;"
            "animation-fill-mode:both;"
            "}"
        )

    def test_vendor_prefix_cascade_order(self):
        css = generate_animation_css([1.0, 0.0], "bounce", "1.5s", identity_mapper, ["-moz-", ""])

        keyframes = "{0%{1}100%{0}}"
        assert css == (
            "@-moz-keyframes bounce " + keyframes +
            "@keyframes bounce " + keyframes +
            ".bounce{"
            "-moz-animation-duration:1.5s;animation-duration:1.5s;"
            "-moz-animation-name:bounce;animation-name:bounce;"
            "-moz-animation-timing-function:linear;animation-timing-function:linear;"
            "-moz-animation-fill-mode:both;animation-fill-mode:both;"
            "}"
        )

    def test_caller_order_is_kept(self):
        css = generate_css_keyframes([1.0, 0.0], "a", identity_mapper, ["", "-moz-"])
        assert css.index("@keyframes") < css.index("@-moz-keyframes")

    def test_standard_prefixes_put_vendor_first(self):
        assert STANDARD_PREFIXES == ("-moz-", "")

    def test_fractional_duration(self):
        css = generate_animation_css([2.0, 1.0, 0.0], "a", 1000 / 3, identity_mapper)
        assert "animation-duration:333.3333333333333ms;" in css

    @pytest.mark.parametrize("name", ["", "1abc", "a b", "a{b", "a;b", "bounce\n"])
    def test_bad_names_rejected(self, name):
        with pytest.raises(ValueError):
            generate_css_keyframes([1.0, 0.0], name, identity_mapper)

    def test_empty_curve_rejected(self):
        with pytest.raises(ValueError):
            generate_animation_css([], "a", 0, identity_mapper)
