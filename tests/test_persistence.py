import logging

from careerlog import (
    CareerEventScope,
    ConfigNode,
    ConstructionState,
    SpaceCenterFacility,
    TransactionReason as R,
    load_save_file,
    write_save_file,
)
from tests._host_helpers import DAY, FEB_1951, MAR_1951, FakeContract, FakeTechNode, FakeVessel, make_log


def _populated_log(host):
    career_log = make_log(host)
    vessel = FakeVessel("Bumper 8")
    contract = FakeContract(title="Downrange", internal_name="downrange", funds_advance=1500.0, funds_completion=6000.0)

    host.now = 2 * DAY
    career_log.record_funds_change(-2500.0, R.VesselRollout)
    career_log.record_funds_change(-120.5, R.Other, scope=CareerEventScope.maintenance())
    career_log.on_contract_accepted(contract)
    career_log.on_vessel_situation_change(vessel, "PRELAUNCH", "FLYING", active_vessel=vessel)
    career_log.add_facility_construction_event(
        SpaceCenterFacility.VehicleAssemblyBuilding, 1, 42000.0, ConstructionState.Started
    )

    host.now = FEB_1951 + 3 * DAY
    career_log.on_contract_completed(contract)
    career_log.on_tech_completed(FakeTechNode("earlyAvionics"))
    career_log.record_funds_change(0.1, R.Progression)
    return career_log


def _state(career_log):
    return (
        career_log.periods,
        career_log.contract_events,
        career_log.launch_events,
        career_log.facility_events,
        career_log.tech_events,
        career_log.cur_period_start,
        career_log.next_period_start,
    )


def test_save_then_load_reproduces_state(host):
    original = _populated_log(host)
    node = ConfigNode("SCENARIO")
    original.save(node)

    restored = make_log(host)
    restored.load(node)

    assert _state(restored) == _state(original)
    assert restored.cur_period_start == FEB_1951
    assert restored.next_period_start == MAR_1951


def test_round_trip_through_save_file(host, tmp_path):
    original = _populated_log(host)
    path = write_save_file(original, tmp_path / "saves" / "persistent.sfs")

    restored = load_save_file(path)

    assert _state(restored) == _state(original)
    assert "name = CareerLog" in path.read_text()


def test_save_sections_use_host_names(host):
    node = ConfigNode("SCENARIO")
    _populated_log(host).save(node)
    assert [n.name for n in node.nodes] == [
        "LOGPERIODS",
        "CONTRACTS",
        "LAUNCHEVENTS",
        "FACILITYCONSTRUCTIONS",
        "TECHS",
    ]
    period = node.get_node("LOGPERIODS").get_nodes("LOGPERIOD")[0]
    assert period.get_value("MaintenanceFees") == "120.5"
    contract = node.get_node("CONTRACTS").get_nodes("CONTRACT")[0]
    assert contract.get_value("Type") == "Accept"


def test_duplicate_period_on_load_is_skipped(host, caplog):
    node = ConfigNode("SCENARIO")
    periods = node.add_node("LOGPERIODS")
    for fees in (10.0, 99.0):
        p = periods.add_node("LOGPERIOD")
        p.add_value("StartUT", 0.0)
        p.add_value("EndUT", float(FEB_1951))
        p.add_value("OtherFees", fees)

    career_log = make_log(host)
    with caplog.at_level(logging.ERROR, logger="CareerLog"):
        career_log.load(node)

    (period,) = career_log.periods
    assert period.other_fees == 10.0
    assert "already exists, skipping" in caplog.text


def test_load_tolerates_missing_and_bad_values(host):
    node = ConfigNode.parse(
        """
        LOGPERIODS
        {
            LOGPERIOD
            {
                StartUT = 0
                EndUT = 2678400
                VABUpgrades = 2.0
                CurrentFunds = lots
            }
        }
        FACILITYCONSTRUCTIONS
        {
            FACILITYCONSTRUCTION
            {
                UT = 10
                Facility = LaunchPad
                State = Completed
            }
        }
        """
    )
    career_log = make_log(host)
    career_log.load(node)
    (period,) = career_log.periods
    assert period.vab_upgrades == 2
    assert period.current_funds == 0.0
    assert period.funds_gain_mult == 1.0
    (facility,) = career_log.facility_events
    assert facility.state is ConstructionState.Completed
    assert facility.cost == 0.0


def test_loaded_pointers_drive_rollover(host):
    original = _populated_log(host)
    node = ConfigNode("SCENARIO")
    original.save(node)

    restored = make_log(host)
    restored.load(node)
    host.now = MAR_1951 + DAY
    assert restored.current_period.start_ut == MAR_1951
    assert len(restored.periods) == 3


def test_free_text_with_braces_and_slashes_survives_save_file(host, tmp_path):
    career_log = make_log(host)
    vessel = FakeVessel("X-1 // Bell")
    host.now = DAY
    career_log.on_contract_accepted(FakeContract(title="Altitude {Record}", internal_name="alt}rec"))
    career_log.on_vessel_situation_change(vessel, "PRELAUNCH", "FLYING", active_vessel=vessel)
    career_log.add_tech_event("line one\nline two \\ end")

    path = write_save_file(career_log, tmp_path / "persistent.sfs")
    restored = load_save_file(path)

    (contract,) = restored.contract_events
    assert contract.display_name == "Altitude {Record}"
    assert contract.internal_name == "alt}rec"
    assert restored.launch_events[0].vessel_name == "X-1 // Bell"
    assert restored.tech_events[0].node_name == "line one\nline two \\ end"
    assert _state(restored) == _state(career_log)


def test_corrupt_period_pointers_fall_back_to_zero(host):
    node = ConfigNode.parse("CurPeriodStart = abc\nNextPeriodStart = \nLOGPERIODS\n{\n}\n")
    career_log = make_log(host)

    career_log.load(node)

    assert career_log.cur_period_start == 0.0
    assert career_log.next_period_start == 0.0
    host.now = DAY
    assert career_log.current_period.start_ut == 0.0
