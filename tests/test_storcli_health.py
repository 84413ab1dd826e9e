"""End-to-end tests for StorcliHealthCheck with canned storcli output."""

import io
import logging

import pytest

from storcli_health.models import HealthCheckConfig
from storcli_health.report import ReportRenderer
from storcli_health.storcli_health import (EXIT_CLEAN, EXIT_PROBLEMS, EXIT_SCHEMA_ERROR,
                                           StorcliHealthCheck)

from storcli_fixtures import FakeRunner, drive_row, drive_state, healthy_responses, wrap

SHOW = ("show",)
SHOW_ALL = ("/c0", "show", "all")
VALL = ("/c0/vall", "show", "all")
BGI = ("/c0/vall", "show", "bgi")
REBUILD = ("/c0/eall/sall", "show", "rebuild")
SALL = ("/c0/eall/sall", "show", "all")
EALL = ("/c0/eall", "show", "all")


@pytest.fixture
def responses():
    return healthy_responses()


def make_check(runners, config=None):
    """Health check answering from FakeRunners keyed by utility name"""
    config = config or HealthCheckConfig(utility_search_order=list(runners))
    output = io.StringIO()
    check = StorcliHealthCheck(
        config=config,
        runner_factory=lambda utility: runners[utility],
        renderer=ReportRenderer(stream=output),
    )
    return check, output


def run_check(responses, argv=None):
    runner = FakeRunner(responses)
    check, output = make_check({"storcli64": runner})
    status = check.run(argv or [])
    return status, output.getvalue(), runner


def single_report(responses):
    check, _ = make_check({"storcli64": FakeRunner(responses)})
    reports = check.check()
    assert len(reports) == 1
    return reports[0]


def test_healthy_system_is_silent(responses):
    status, output, runner = run_check(responses)

    assert status == EXIT_CLEAN
    assert output == ""
    assert REBUILD not in runner.calls


def test_commands_issued_in_order(responses):
    _, _, runner = run_check(responses)

    assert runner.calls == [SHOW, SHOW_ALL, VALL, BGI, SALL, EALL]


# ============================================
# Single-field flips
# ============================================

def test_vd_state_flip(responses):
    responses[VALL]["/c0/v0"][0]["State"] = "Dgrd"

    report = single_report(responses)

    assert [f.message for f in report.findings] == ["VD /c0/v0 (data) Degraded"]


def test_vd_access_flip(responses):
    responses[VALL]["/c0/v0"][0]["Access"] = "RO"

    assert [f.message for f in single_report(responses).findings] == ["VD /c0/v0 (data) access Read Only"]


def test_vd_consistency_flip(responses):
    responses[VALL]["/c0/v0"][0]["Consist"] = "No"

    assert [f.message for f in single_report(responses).findings] == ["VD /c0/v0 (data) NOT Consistent"]


def test_bgi_in_progress_hides_inconsistency(responses):
    responses[VALL]["/c0/v0"][0]["Consist"] = "No"
    responses[VALL]["VD0 Properties"]["Active Operations"] = "Background Initialization"
    responses[BGI]["VD Operation Status"][0].update(
        {"Progress%": 21, "Status": "In progress", "Estimated Time Left": "7 Hours 2 Minutes"})

    messages = [f.message for f in single_report(responses).findings]

    assert messages == ["VD /c0/v0 (data) Background Initialization 21% ETA 7 Hours 2 Minutes"]


def test_enclosure_status_flip(responses):
    responses[EALL]["Enclosure /c0/e252  :"]["Information"]["Status"] = "Critical"

    assert [f.message for f in single_report(responses).findings] == ["Enclosure /c0/e252 Critical"]


def test_smart_flag_flip(responses):
    responses[SALL]["Drive /c0/e252/s1 - Detailed Information"]["Drive /c0/e252/s1 State"] = \
        drive_state(smart_alert="Yes")

    assert [f.message for f in single_report(responses).findings] == ["Drive /c0/e252/s1 S.M.A.R.T alert Yes"]


@pytest.mark.parametrize("count,expected", [
    (5, []),
    (10, []),
    (11, ["Drive /c0/e252/s3 Media Errors 11"]),
    (15, ["Drive /c0/e252/s3 Media Errors 15"]),
])
def test_media_error_flip(responses, count, expected):
    responses[SALL]["Drive /c0/e252/s3 - Detailed Information"]["Drive /c0/e252/s3 State"] = \
        drive_state(media_errors=count)

    assert [f.message for f in single_report(responses).findings] == expected


def test_predictive_failure_flip(responses):
    responses[SALL]["Drive /c0/e252/s0 - Detailed Information"]["Drive /c0/e252/s0 State"] = \
        drive_state(predictive_failures=1)

    assert [f.message for f in single_report(responses).findings] == ["Drive /c0/e252/s0 Predictive Failures 1"]


def test_overview_counters_summary(responses):
    responses[SHOW]["System Overview"][0].update({"DNOpt": 1, "DGs": 4})

    assert [f.message for f in single_report(responses).findings] == ["1 of 4 Drive groups NOT OK"]


# ============================================
# Missing and rebuilding drives
# ============================================

def test_missing_drive_only_in_topology(responses):
    show_all = responses[SHOW_ALL]
    show_all["PD LIST"] = [row for row in show_all["PD LIST"] if row["EID:Slt"] != "252:3"]
    for row in show_all["TOPOLOGY"]:
        if row["Row"] == 3:
            row.update({"EID:Slot": "-", "DID": "-", "State": "Msng"})
        elif row["Arr"] == 0 and row["Row"] == "-":
            row["State"] = "Dgrd"
    del responses[SALL]["Drive /c0/e252/s3"]
    del responses[SALL]["Drive /c0/e252/s3 - Detailed Information"]

    report = single_report(responses)

    assert [f.message for f in report.faults] == ["Drive in DG 0 Array 0 Row 3 is Missing"]
    assert report.warnings == []


def test_rebuild_queries_progress(responses):
    responses[SHOW_ALL]["PD LIST"][2] = drive_row(2, state="Rbld")
    responses[SHOW_ALL]["TOPOLOGY"][4]["State"] = "Rbld"
    responses[REBUILD][2].update({"Progress%": 64, "Status": "In progress",
                                  "Estimated Time Left": "38 Minutes"})
    responses[SALL]["Drive /c0/e252/s2 - Detailed Information"]["Drive /c0/e252/s2 State"] = \
        drive_state(media_errors=40, smart_alert="Yes")

    runner = FakeRunner(responses)
    check, _ = make_check({"storcli64": runner})
    report = check.check()[0]

    assert REBUILD in runner.calls
    assert [f.message for f in report.faults] == ["Drive /c0/e252/s2 Rebuild 64%"]
    assert [f.message for f in report.summary] == ["1 of 4 drives Rebuilding"]


def test_failed_rebuild_query_skips_only_that_controller(responses, caplog):
    responses[SHOW]["Number of Controllers"] = 2
    responses[SHOW]["System Overview"].append(dict(responses[SHOW]["System Overview"][0], Ctl=1))
    responses[SHOW_ALL]["TOPOLOGY"][4]["State"] = "Rbld"
    del responses[REBUILD]
    responses[("/c1", "show", "all")] = dict(responses[SHOW_ALL], TOPOLOGY=[])
    for args in (VALL, BGI, SALL, EALL):
        responses[(args[0].replace("/c0", "/c1"),) + args[1:]] = responses[args]

    runner = FakeRunner(responses)
    check, _ = make_check({"storcli64": runner})
    with caplog.at_level(logging.WARNING, logger="storcli-health"):
        reports = check.check()

    assert [report.controller.index for report in reports] == ["1"]
    assert "controller 0" in caplog.text


# ============================================
# Error handling
# ============================================

def test_unavailable_detail_command_skips_controller(responses, caplog):
    del responses[SALL]
    responses[VALL]["/c0/v0"][0]["State"] = "Dgrd"

    with caplog.at_level(logging.WARNING, logger="storcli-health"):
        status, output, _ = run_check(responses)

    assert status == EXIT_CLEAN
    assert output == ""
    assert "skipping controller" in caplog.text


def test_empty_response_data_skips_controller(responses):
    responses[EALL] = wrap({}, status="Failure")

    status, output, _ = run_check(responses)

    assert status == EXIT_CLEAN
    assert output == ""


def test_schema_drift_is_fatal(responses):
    responses[SHOW] = {"Controller Count": 1}

    status, output, runner = run_check(responses)

    assert status == EXIT_SCHEMA_ERROR
    assert output == ""
    assert runner.calls == [SHOW]


def test_unavailable_enumeration_skips_utility(responses):
    check, output = make_check({
        "storcli64": FakeRunner({}),
        "perccli64": FakeRunner(responses, utility="perccli64"),
    })
    check.config.utility_search_order = ["storcli64", "perccli64"]
    responses[VALL]["/c0/v0"][0]["State"] = "OfLn"

    status = check.run([])

    assert status == EXIT_PROBLEMS
    assert output.getvalue().startswith("perccli64 controller 0")


def test_missing_binary_is_skipped(responses):
    check, output = make_check({"storcli64": FakeRunner(responses, available=False)})

    assert check.run([]) == EXIT_CLEAN
    assert output.getvalue() == ""


def test_same_binary_evaluated_once(responses):
    runner = FakeRunner(responses)
    check, _ = make_check({"storcli64": runner, "storcli": runner})

    check.check()

    assert runner.calls.count(SHOW) == 1


def test_controller_without_vds_skips_vd_commands(responses):
    responses[SHOW_ALL]["VD LIST"] = []
    responses[SHOW_ALL]["Virtual Drives"] = 0
    del responses[VALL]
    del responses[BGI]

    status, _, runner = run_check(responses)

    assert status == EXIT_CLEAN
    assert VALL not in runner.calls


def test_controller_without_enclosures_skips_enclosure_command(responses):
    responses[SHOW_ALL]["Enclosures"] = 0
    del responses[EALL]

    status, _, runner = run_check(responses)

    assert status == EXIT_CLEAN
    assert EALL not in runner.calls


# ============================================
# Output and options
# ============================================

def test_report_output_and_exit_status(responses):
    responses[SHOW]["System Overview"][0].update({"DNOpt": 1, "VNOpt": 1})
    responses[VALL]["/c0/v0"][0]["State"] = "Dgrd"
    responses[SHOW_ALL]["PD LIST"][3] = drive_row(3, state="UGood")

    status, output, _ = run_check(responses)

    assert status == EXIT_PROBLEMS
    assert output.splitlines() == [
        "storcli64 controller 0 (AVAGOMegaRAIDSAS9361-8i):",
        "  1 of 1 Drive groups NOT OK",
        "  1 of 1 Virtual drives NOT OK",
        "  1 of 4 drives Unused",
        "  FAULT: VD /c0/v0 (data) Degraded",
        "  WARNING: Drive /c0/e252/s3 Unused",
    ]


def test_command_line_overrides_thresholds(responses):
    responses[SALL]["Drive /c0/e252/s3 - Detailed Information"]["Drive /c0/e252/s3 State"] = \
        drive_state(media_errors=3)

    status, output, _ = run_check(responses, ["--media-errors", "2"])

    assert status == EXIT_PROBLEMS
    assert "FAULT: Drive /c0/e252/s3 Media Errors 3" in output


def test_debug_dump_goes_to_log_not_report(responses, caplog):
    with caplog.at_level(logging.DEBUG, logger="storcli-health"):
        status, output, _ = run_check(responses, ["--debug"])

    assert status == EXIT_CLEAN
    assert output == ""
    assert '"physical_drives"' in caplog.text


def test_debug_dump_includes_topology_rows(responses, caplog):
    with caplog.at_level(logging.DEBUG, logger="storcli-health"):
        run_check(responses, ["--debug"])

    assert '"topology"' in caplog.text
    assert '"eid_slot": "252:3"' in caplog.text


def test_failed_command_status_logged_with_debug(responses, caplog):
    responses[EALL] = wrap(responses[EALL], status="Failure")

    with caplog.at_level(logging.DEBUG, logger="storcli-health"):
        status, output, _ = run_check(responses, ["--debug"])

    assert status == EXIT_CLEAN
    assert output == ""
    assert "/c0/eall show all reported status Failure" in caplog.text
    assert [r.name for r in caplog.records if "reported status" in r.getMessage()] == ["storcli-health"]
