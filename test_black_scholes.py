import math

import pytest
from black_scholes import bs_digital, norm_cdf


def test_norm_cdf_reference_points():
    assert norm_cdf(0.0) == pytest.approx(0.5, abs=1e-7)
    assert norm_cdf(1.0) == pytest.approx(0.8413447, abs=1e-6)
    assert norm_cdf(-1.96) == pytest.approx(0.0249979, abs=1e-6)


def test_norm_cdf_matches_erf():
    for x in (-3.0, -1.2, -0.3, 0.4, 1.7, 2.5):
        exact = 0.5 * (1.0 + math.erf(x / math.sqrt(2.0)))
        assert norm_cdf(x) == pytest.approx(exact, abs=1e-7)


def test_norm_cdf_symmetry():
    assert norm_cdf(-0.7) == pytest.approx(1.0 - norm_cdf(0.7))


@pytest.mark.parametrize("S,K,expected", [(110, 100, 1.0), (90, 100, 0.0), (100, 100, 0.0)])
def test_expired_is_payoff_indicator(S, K, expected):
    assert bs_digital(S, K, 0.0, 0.6) == expected


def test_zero_vol_is_payoff_indicator():
    assert bs_digital(110, 100, 0.5, 0.0) == 1.0
    assert bs_digital(90, 100, 0.5, 0.0) == 0.0


def test_tiny_vol_converges_to_indicator():
    assert bs_digital(110, 100, 0.5, 1e-6) == 1.0
    assert bs_digital(90, 100, 0.5, 1e-6) == 0.0


def test_atm_value():
    # d2 = (0.04 - 0.125) / 0.5 = -0.17
    assert bs_digital(100, 100, 1.0, 0.5) == pytest.approx(0.432505, abs=1e-5)


def test_monotone_in_spot_and_strike():
    spots = [60, 80, 95, 100, 105, 120, 150]
    probs = [bs_digital(S, 100, 0.25, 0.6) for S in spots]
    assert probs == sorted(probs)

    strikes = [60, 80, 95, 100, 105, 120, 150]
    probs = [bs_digital(100, K, 0.25, 0.6) for K in strikes]
    assert probs == sorted(probs, reverse=True)


def test_rate_is_a_parameter():
    assert bs_digital(100, 100, 1.0, 0.5, r=0.0) < bs_digital(100, 100, 1.0, 0.5, r=0.1)


def test_rejects_non_positive_prices():
    with pytest.raises(ValueError):
        bs_digital(0, 100, 1.0, 0.5)
