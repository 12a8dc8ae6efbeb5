import math

import pytest

from springanim.core.physics import (
    Particle,
    SpringParameters,
    SpringDidNotConverge,
    dampened_hooke_force,
    is_resting,
    sample,
    sample_spring,
    step,
)


class TestForce:
    def test_hooke_term(self):
        assert dampened_hooke_force(displacement=1, velocity=0, stiffness=1, damping=0) == -1

    def test_damping_term(self):
        assert dampened_hooke_force(0, 1, 0, 1) == -1

    def test_linear_combination(self):
        assert dampened_hooke_force(2, 3, 5, 7) == -(5 * 2) - (7 * 3)

    def test_no_clamping(self):
        assert dampened_hooke_force(1e6, 0, 170, 0) == -1.7e8


class TestParticle:
    def test_defaults(self):
        p = Particle()
        assert (p.displacement, p.velocity, p.mass) == (0.0, 0.0, 1.0)

    @pytest.mark.parametrize("mass", [0, -1, -0.5])
    def test_rejects_non_positive_mass(self, mass):
        with pytest.raises(ValueError):
            Particle(1, 0, mass)

    def test_parameters_reject_non_positive_mass(self):
        with pytest.raises(ValueError):
            SpringParameters(stiffness=1, damping=0.1, mass=0)

    @pytest.mark.parametrize("stiffness, damping", [(-1, 0.1), (1, -0.1), (-0.5, -0.5)])
    def test_parameters_reject_negative_constants(self, stiffness, damping):
        with pytest.raises(ValueError):
            SpringParameters(stiffness=stiffness, damping=damping)


class TestStep:
    def test_velocity_updates_before_displacement(self):
        p = Particle(10, 0, 1)
        x = step(p, 1, 0.1)

        # v = 0 + (-10 - 0) / 1, x = 10 + v / 100
        assert p.velocity == -10
        assert x == p.displacement == pytest.approx(9.9)

    def test_mass_divides_force(self):
        p = Particle(10, 0, 2)
        step(p, 1, 0)
        assert p.velocity == -5
        assert p.displacement == pytest.approx(9.95)

    def test_mutates_in_place(self):
        p = Particle(1, 0, 1)
        step(p, 1, 0.1)
        assert p.displacement != 1


class TestRest:
    @pytest.mark.parametrize("x, v, expected", [
        (0, 0, True),
        (0.49, 0.19, True),
        (-0.5, 0, True),
        (0.5, 0, False),
        (0, 0.2, False),
        (0, -0.2, False),
        (0.3, -0.19, True),
        (-0.51, 0, False),
    ])
    def test_threshold(self, x, v, expected):
        assert is_resting(Particle(x, v)) is expected

    def test_non_finite_is_never_resting(self):
        assert is_resting(Particle(math.nan, 0)) is False
        assert is_resting(Particle(math.inf, 0)) is False


class TestSample:
    def test_already_resting_returns_empty(self):
        assert sample(0, 0, 1, 170, 26) == []

    def test_default_preset_regression(self):
        assert len(sample(100, 0, 1, 1, 0.1)) == 106

    def test_small_displacement_regression(self):
        points = sample(10, 0, 1, 1, 0.1)

        assert len(points) == 70
        assert points[:3] == pytest.approx([9.9, 9.711, 9.44379])

    def test_pure_damping(self):
        points = sample(0, 10, 1, 0, 0.5)

        assert points == pytest.approx([0.05, 0.075, 0.0875, 0.09375, 0.096875])

    def test_heavy_mass_regression(self):
        assert len(sample(100, 0, 2, 0.2, 0.2)) == 576

    def test_first_sample_is_after_first_step(self):
        points = sample(100, 0, 1, 1, 0.1)
        assert points[0] == pytest.approx(99.0)

    def test_stops_one_step_before_rest(self):
        points = sample(100, 0, 1, 2, 0.3)

        p = Particle(100, 0, 1)
        for expected in points:
            step(p, 2, 0.3)
            assert p.displacement == expected
            assert not is_resting(p)

        step(p, 2, 0.3)
        assert is_resting(p)

    def test_deterministic(self):
        assert sample(37, 4, 1.5, 0.7, 0.15) == sample(37, 4, 1.5, 0.7, 0.15)

    def test_unstable_parameters_raise(self):
        # k=170, b=26 grows ~26x per step with this integration scheme
        with pytest.raises(SpringDidNotConverge) as info:
            sample(1, 0, 1, 170, 26)

        assert info.value.steps > 0
        assert "diverged" in str(info.value)

    def test_step_cap(self):
        with pytest.raises(SpringDidNotConverge) as info:
            sample(100, 0, 1, 1, 0.1, max_steps=10)

        assert info.value.steps == 10
        assert info.value.displacement != 0

    def test_undamped_spring_hits_cap(self):
        with pytest.raises(SpringDidNotConverge):
            sample(10, 0, 1, 0.1, 0, max_steps=5000)

    def test_invalid_cap(self):
        with pytest.raises(ValueError):
            sample(1, 0, 1, 1, 0.1, max_steps=0)

    def test_rejects_zero_mass(self):
        with pytest.raises(ValueError):
            sample(1, 0, 0, 1, 0.1)

    def test_sample_spring_matches_sample(self):
        params = SpringParameters(stiffness=0.5, damping=0.05, mass=1.0)
        assert sample_spring(100, 0, params) == sample(100, 0, 1.0, 0.5, 0.05)
