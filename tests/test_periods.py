import logging

import pytest

from careerlog import SpaceCenterFacility
from tests._host_helpers import APR_1951, DAY, FEB_1951, MAR_1951, make_log


def test_first_query_creates_january_period(career_log):
    period = career_log.current_period
    assert period.start_ut == 0.0
    assert period.end_ut == FEB_1951
    assert [p.start_ut for p in career_log.periods] == [0.0]
    assert career_log.cur_period_start == 0.0
    assert career_log.next_period_start == FEB_1951


def test_periods_tile_after_time_jump(host, career_log):
    career_log.current_period
    host.now = APR_1951 + 5 * DAY

    current = career_log.current_period

    assert current.start_ut == APR_1951
    starts = [p.start_ut for p in career_log.periods]
    assert starts == [0.0, FEB_1951, MAR_1951, APR_1951]
    periods = sorted(career_log.periods, key=lambda p: p.start_ut)
    for prev, nxt in zip(periods, periods[1:]):
        assert prev.end_ut == nxt.start_ut


def test_rollover_is_idempotent_at_boundary(host, career_log):
    career_log.current_period
    host.now = FEB_1951

    first = career_log.current_period
    second = career_log.current_period
    third = career_log.current_period

    assert first is second is third
    assert first.start_ut == FEB_1951
    assert len(career_log.periods) == 2


def test_rollover_snapshots_closing_period(host, career_log):
    career_log.current_period
    host.funds_value = 123456.0
    host.science_value = 77.5
    host.science_total = 310.0
    host.multiplier = 0.8
    host.upgrades = {
        SpaceCenterFacility.VehicleAssemblyBuilding: 3,
        SpaceCenterFacility.SpaceplaneHangar: 1,
        SpaceCenterFacility.ResearchAndDevelopment: 2,
    }
    host.now = FEB_1951 + DAY

    career_log.current_period
    january = career_log.get_period(0.0)

    assert january.current_funds == 123456.0
    assert january.current_sci == 77.5
    assert january.science_earned == 310.0
    assert january.funds_gain_mult == 0.8
    assert (january.vab_upgrades, january.sph_upgrades, january.rnd_upgrades) == (3, 1, 2)
    # the new period has not been closed yet
    assert career_log.get_period(FEB_1951).current_funds == 0.0


def test_negative_science_total_is_clamped(host, career_log):
    host.science_total = -1.0
    career_log.current_period
    host.now = FEB_1951
    career_log.current_period
    assert career_log.get_period(0.0).science_earned == 0.0


def test_failing_host_query_is_logged_and_zeroed(host, caplog):
    career_log = make_log(host)
    services = career_log.host

    def broken(facility):
        raise RuntimeError("construction mod missing")

    services.spent_upgrades = broken
    career_log.current_period
    host.now = FEB_1951

    with caplog.at_level(logging.ERROR, logger="CareerLog"):
        career_log.current_period

    january = career_log.get_period(0.0)
    assert january.vab_upgrades == 0
    assert january.current_funds == host.funds_value
    assert "construction mod missing" in caplog.text


def test_non_finite_host_values_fall_back_to_defaults(host, caplog):
    career_log = make_log(host)
    career_log.current_period
    host.funds_value = float("nan")
    host.multiplier = float("inf")
    host.now = FEB_1951

    with caplog.at_level(logging.WARNING, logger="CareerLog"):
        career_log.current_period

    january = career_log.get_period(0.0)
    assert january.current_funds == 0.0
    assert january.funds_gain_mult == 1.0
    assert "returned nan" in caplog.text


def test_multi_month_granularity(host):
    career_log = make_log(host, log_period_months=3)
    assert career_log.current_period.end_ut == APR_1951


def test_get_or_create_returns_existing(career_log):
    a = career_log.get_or_create_period(FEB_1951)
    b = career_log.get_or_create_period(FEB_1951)
    assert a is b
    assert a.end_ut == MAR_1951


@pytest.mark.parametrize("months", [1, 2, 6, 12])
def test_tiling_holds_for_any_granularity(host, months):
    career_log = make_log(host, log_period_months=months)
    career_log.current_period
    host.now = APR_1951 * 8
    career_log.current_period
    periods = career_log.periods
    assert len(periods) > 1
    for prev, nxt in zip(periods, periods[1:]):
        assert prev.end_ut == nxt.start_ut
    assert periods[-1].contains(host.now)
