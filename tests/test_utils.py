"""Tests for the pure helpers: tokenizer, rate math, centering and attraction."""

import pytest

from utils import (
    ATTRACTION_RADIUS,
    MAX_SPEED,
    MIN_SPEED,
    NO_ATTRACTION,
    blend_color,
    calculate_interval_ms,
    clamp_speed,
    compute_offset,
    magnetic_transform,
    snap_speed,
    tokenize,
)


class TestTokenize:

    def test_splits_on_whitespace(self):
        assert tokenize("Hello world foo") == ["Hello", "world", "foo"]

    def test_collapses_whitespace_runs(self):
        assert tokenize("  one\t\ttwo \n\n three  ") == ["one", "two", "three"]

    def test_keeps_punctuation_attached(self):
        assert tokenize("Hi, there. Ready?") == ["Hi,", "there.", "Ready?"]

    @pytest.mark.parametrize("script", ["", "   ", "\n\t \n"])
    def test_blank_script_gives_no_tokens(self, script):
        assert tokenize(script) == []

    def test_non_string_gives_no_tokens(self):
        assert tokenize(None) == []

    @pytest.mark.parametrize("script", [
        "a  b   c",
        "\tLeading and trailing\n",
        "Zeile eins\n\nZeile zwei\r\nDrei",
    ])
    def test_join_reconstructs_normalized_script(self, script):
        tokens = tokenize(script)
        assert " ".join(tokens) == " ".join(script.split())
        assert all(tokens)


class TestInterval:

    def test_speed_two_at_base_rate_is_150ms(self):
        assert calculate_interval_ms(2.0, 200) == 150.0

    def test_speed_one_is_300ms(self):
        assert calculate_interval_ms(1.0) == 300.0

    def test_strictly_decreasing_and_positive_over_range(self):
        speeds = [round(MIN_SPEED + i * 0.1, 1) for i in range(100)]
        intervals = [calculate_interval_ms(s) for s in speeds]
        assert all(i > 0 for i in intervals)
        assert all(a > b for a, b in zip(intervals, intervals[1:]))

    def test_zero_speed_never_ticks(self):
        assert calculate_interval_ms(0) == float("inf")


class TestSpeedClamping:

    def test_clamp_limits(self):
        assert clamp_speed(0.0) == MIN_SPEED
        assert clamp_speed(-3) == MIN_SPEED
        assert clamp_speed(42) == MAX_SPEED
        assert clamp_speed(3.3) == 3.3

    def test_clamp_rejects_garbage(self):
        assert clamp_speed("fast") == MIN_SPEED
        assert clamp_speed(float("nan")) == MIN_SPEED

    def test_snap_to_tenth(self):
        assert snap_speed(3.14159) == 3.1
        assert snap_speed(2.06) == 2.1
        assert snap_speed(10.04) == 10.0
        assert snap_speed(0.01) == 0.1


class TestComputeOffset:

    def test_centers_token(self):
        # token at 400..440 in a 600px viewport -> middle (420) at 300
        assert compute_offset(600, 400, 40) == 120

    def test_can_be_negative(self):
        assert compute_offset(600, 0, 40) == -280

    def test_linear_in_token_top(self):
        base = compute_offset(500, 100, 30)
        assert compute_offset(500, 350, 30) - base == 250
        assert compute_offset(500, 100, 30) == base


class TestMagneticTransform:

    def test_identity_at_radius(self):
        assert magnetic_transform((100 + ATTRACTION_RADIUS, 100), (100, 100)) == NO_ATTRACTION

    def test_identity_far_away(self):
        assert magnetic_transform((1000, 1000), (0, 0)) == NO_ATTRACTION

    def test_pull_towards_pointer(self):
        dx, dy, scale = magnetic_transform((110, 100), (100, 100))
        strength = (150 - 10) / 150
        assert dx == pytest.approx(10 * strength * 0.3)
        assert dy == 0
        assert scale == pytest.approx(1 + strength * 0.1)

    def test_diagonal_displacement_keeps_direction(self):
        dx, dy, _ = magnetic_transform((70, 140), (100, 100))
        assert dx < 0 and dy > 0
        assert dy / dx == pytest.approx(40 / -30)

    def test_scale_grows_as_pointer_approaches(self):
        scales = [magnetic_transform((100 + d, 100), (100, 100)).scale for d in (140, 100, 50, 10, 0.001)]
        assert scales == sorted(scales)
        assert scales[-1] == pytest.approx(1.1, abs=1e-4)

    def test_on_center_has_no_displacement(self):
        dx, dy, scale = magnetic_transform((50, 50), (50, 50))
        assert (dx, dy) == (0, 0)
        assert scale == pytest.approx(1.1)


class TestBlendColor:

    def test_full_alpha_is_foreground(self):
        assert blend_color("#ffffff", "#000000", 1.0) == "#ffffff"

    def test_half_alpha(self):
        assert blend_color("#ffffff", "#000000", 0.5) == "#808080"

    def test_invalid_color_falls_back_to_foreground(self):
        assert blend_color("white", "#000000", 0.5) == "white"
