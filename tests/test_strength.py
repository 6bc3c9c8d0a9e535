"""Tests for e1RM conversions."""

from __future__ import annotations

import pytest

from liftcoach.services.strength import (
    estimate_1rm,
    estimate_1rm_brzycki,
    percentage_of_1rm,
    reps_at_percentage,
    weight_for_reps,
)


def test_single_is_its_own_max():
    for w in (20.0, 62.5, 100.0, 227.5):
        assert estimate_1rm(w, 1) == w


def test_epley_formula():
    assert estimate_1rm(100, 5) == pytest.approx(116.6667, rel=1e-4)
    assert estimate_1rm(100, 10) == pytest.approx(133.3333, rel=1e-4)


def test_more_reps_means_higher_estimate():
    for reps in range(2, 15):
        assert estimate_1rm(80, reps) > 80
        assert estimate_1rm(80, reps + 1) > estimate_1rm(80, reps)


def test_invalid_input_yields_zero():
    assert estimate_1rm(100, 0) == 0.0
    assert estimate_1rm(100, -3) == 0.0
    assert estimate_1rm(0, 5) == 0.0
    assert estimate_1rm(-10, 5) == 0.0


def test_weight_for_reps_inverts_epley():
    for w, r in [(100, 5), (72.5, 8), (140, 3), (30, 12)]:
        assert weight_for_reps(estimate_1rm(w, r), r) == pytest.approx(w)


def test_weight_for_reps_invalid():
    assert weight_for_reps(0, 5) == 0.0
    assert weight_for_reps(100, 0) == 0.0
    assert weight_for_reps(100, 1) == 100.0


def test_brzycki():
    assert estimate_1rm_brzycki(100, 5) == pytest.approx(112.5)
    assert estimate_1rm_brzycki(100, 1) == 100.0
    assert estimate_1rm_brzycki(100, 40) == 100.0
    assert estimate_1rm_brzycki(0, 5) == 0.0


def test_percentage_of_1rm():
    # 100 x 5 -> e1RM 116.67 -> ~85.7%
    assert percentage_of_1rm(100, 5) == pytest.approx(85.714, rel=1e-3)
    assert percentage_of_1rm(100, 1) == pytest.approx(100.0)
    assert percentage_of_1rm(100, 0) == 0.0


def test_reps_at_percentage():
    assert reps_at_percentage(100) == 1
    assert reps_at_percentage(50) == 30
    assert reps_at_percentage(75) == 10
    assert reps_at_percentage(0) == 1
    assert reps_at_percentage(120) == 1
