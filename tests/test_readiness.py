"""Tests for readiness auto-regulation."""

from __future__ import annotations

from liftcoach.models import Readiness
from liftcoach.services.readiness import (
    INTENSITY_INCREASE,
    INTENSITY_NEUTRAL,
    INTENSITY_REDUCE,
    NEUTRAL_DIRECTIVES,
    readiness_directives,
)


def test_reduce_flags():
    assert Readiness(energy="low").should_reduce_intensity is True
    assert Readiness(soreness="high").should_reduce_intensity is True
    assert Readiness(energy="ok", soreness="mild").should_reduce_intensity is False


def test_increase_flags():
    assert Readiness(energy="high", soreness="none").should_increase_intensity is True
    assert Readiness(energy="high", soreness="mild").should_increase_intensity is False
    assert Readiness(energy="ok").should_increase_intensity is False


def test_low_energy_caps_rpe_and_trims_sets():
    d = readiness_directives(Readiness(energy="low"))
    assert d.intensity == INTENSITY_REDUCE
    assert d.apply_rpe_cap(8.0) == 7.5
    assert d.apply_rpe_cap(7.0) == 7.0
    assert d.apply_backoff_sets(3) == 2
    assert d.apply_working_sets(3) == 2
    assert any("Reduced intensity" in n for n in d.notes)


def test_set_reductions_never_drop_below_one():
    d = readiness_directives(Readiness(soreness="high"))
    assert d.apply_backoff_sets(1) == 1
    assert d.apply_working_sets(1) == 1
    assert d.apply_backoff_sets(0) == 0


def test_high_energy_raises_cap_with_ceiling():
    d = readiness_directives(Readiness(energy="high"))
    assert d.intensity == INTENSITY_INCREASE
    assert d.apply_rpe_cap(8.0) == 8.5
    assert d.apply_rpe_cap(9.5) == 9.5
    assert d.apply_backoff_sets(3) == 4
    assert d.apply_working_sets(3) == 3


def test_neutral_day_changes_nothing():
    d = readiness_directives(Readiness())
    assert d.intensity == INTENSITY_NEUTRAL
    assert d.apply_rpe_cap(8.0) == 8.0
    assert d.apply_backoff_sets(3) == 3
    assert d.include_optional is True
    assert d.notes == ()


def test_short_session_drops_optionals():
    d = readiness_directives(Readiness(time_available_minutes=45))
    assert d.include_optional is False
    assert any("45 min" in n for n in d.notes)
    assert readiness_directives(Readiness(time_available_minutes=46)).include_optional is True


def test_cutoff_from_env(monkeypatch):
    monkeypatch.setenv("OPTIONAL_CUTOFF_MINUTES", "30")
    assert readiness_directives(Readiness(time_available_minutes=40)).include_optional is True


def test_neutral_directives_constant():
    assert NEUTRAL_DIRECTIVES.apply_rpe_cap(8.0) == 8.0
    assert NEUTRAL_DIRECTIVES.include_optional is True
