import csv

import pytest

from careerlog import (
    CSV_COLUMNS,
    CareerEventScope,
    ConstructionState,
    ExportError,
    SpaceCenterFacility,
    TransactionReason as R,
)
from careerlog.csv_export import build_csv_rows, format_number
from tests._host_helpers import DAY, FEB_1951, FakeContract, FakeVessel, make_log


def _read(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


def test_header_has_22_locked_columns(career_log, tmp_path):
    out = tmp_path / "career.csv"
    career_log.export_to_file(str(out))
    with open(out, newline="", encoding="utf-8") as f:
        header = next(csv.reader(f))
    assert header == CSV_COLUMNS
    assert len(header) == 22
    assert header[0] == "Month" and header[-1] == "Facilities"


def test_empty_period_row(career_log, tmp_path):
    career_log.current_period
    out = tmp_path / "career.csv"
    career_log.export_to_file(str(out))

    (row,) = _read(out)
    assert row["Month"] == "1951-01"
    for col in ("Launches", "Accepted contracts", "Completed contracts", "Tech", "Facilities"):
        assert row[col] == ""
    for col in ("Contract advances", "Contract rewards", "Contract penalties", "Facility construction costs"):
        assert row[col] == "0"
    assert row["Other Fees"] == "0"


def test_rows_follow_period_order_and_aggregate_by_time(host, tmp_path):
    career_log = make_log(host)
    orbit = FakeContract(title="First Orbit", internal_name="orbit", funds_advance=1000.0, funds_completion=9000.0)
    moon = FakeContract(title="Moon Flyby", internal_name="moon", funds_advance=2000.0, funds_failure=-500.0)
    vessel = FakeVessel("Sputnik, Mk 2")

    host.now = 3 * DAY
    career_log.record_funds_change(-700.0, R.VesselRollout)
    career_log.record_funds_change(-300.0, R.Other, scope=CareerEventScope.tooling())
    career_log.record_funds_change(-50000.0, R.StructureConstruction)
    career_log.record_funds_change(-75.0, R.RnDPartPurchase)
    career_log.record_funds_change(250.0, R.Progression)
    career_log.on_contract_accepted(orbit)
    career_log.on_contract_accepted(moon)
    career_log.on_vessel_situation_change(vessel, "PRELAUNCH", "FLYING", active_vessel=vessel)
    career_log.add_tech_event("basicRocketry")
    career_log.add_facility_construction_event(
        SpaceCenterFacility.VehicleAssemblyBuilding, 1, 45000.0, ConstructionState.Started
    )

    host.now = FEB_1951 + DAY
    career_log.record_funds_change(-1200.0, R.ContractPenalty)
    career_log.on_contract_cancelled(moon)
    career_log.on_contract_completed(orbit)
    career_log.add_facility_construction_event(
        SpaceCenterFacility.VehicleAssemblyBuilding, 1, 45000.0, ConstructionState.Completed
    )

    out = tmp_path / "career.csv"
    career_log.export_to_file(str(out))
    jan, feb = _read(out)

    assert jan["Month"] == "1951-01"
    assert jan["Current Funds"] == "25000"
    assert jan["Current Sci"] == "12.5"
    assert jan["Total sci earned"] == "40.0"
    assert jan["Contract advances"] == "3000"
    assert jan["Launch fees"] == "700"
    assert jan["Tooling"] == "300"
    assert jan["Entry Costs"] == "75"
    assert jan["Other funds earned"] == "250"
    assert jan["Facility construction costs"] == "45000"
    assert jan["Other Fees"] == "5000"
    assert jan["Launches"] == "Sputnik, Mk 2"
    assert jan["Accepted contracts"] == "First Orbit, Moon Flyby"
    assert jan["Tech"] == "basicRocketry"
    assert jan["Facilities"] == "VehicleAssemblyBuilding (2) - Started"

    assert feb["Month"] == "1951-02"
    assert feb["Contract penalties"] == "1200"
    assert feb["Contract rewards"] == "9000"
    assert feb["Completed contracts"] == "First Orbit"
    assert feb["Facility construction costs"] == "0"
    assert feb["Facilities"] == "VehicleAssemblyBuilding (2) - Completed"


def test_rows_are_pure(career_log):
    career_log.current_period
    first = list(build_csv_rows(career_log))
    second = list(build_csv_rows(career_log))
    assert first == second
    assert len(first[0]) == len(CSV_COLUMNS)


@pytest.mark.parametrize(
    "value,digits,expected",
    [
        (2.5, 0, "3"),
        (-2.5, 0, "-3"),
        (-0.4, 0, "0"),
        (-0.0, 1, "0.0"),
        (12.25, 1, "12.3"),
        (1234567.891, 0, "1234568"),
        (0.05, 1, "0.1"),
    ],
)
def test_number_format(value, digits, expected):
    assert format_number(value, digits) == expected


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_format_number_rejects_non_finite_values(value):
    with pytest.raises(ExportError):
        format_number(value, 0)
