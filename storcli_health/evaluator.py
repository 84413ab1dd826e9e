"""Health rules applied to the reconciled controller state"""

import logging
import re
from typing import Dict, List, Optional

from .acronyms import translate
from .errors import MissingFieldWarning
from .models import (Controller, ControllerReport, Enclosure, Finding, HealthCheckConfig,
                     PhysicalDrive, Severity, SlotAddress, TopologySummary, VirtualDrive)

HEALTHY_DRIVE_STATES = {"Onln", "JBOD", "GHS", "DHS"}
UNUSED_DRIVE_STATE = "UGood"
REBUILDING_DRIVE_STATE = "Rbld"
ACCEPTED_BBU_STATES = {"Optimal", "Missing", "N/A"}
BACKGROUND_INIT = "background initialization"
# Commas inside parenthesized progress detail do not separate operations
OPERATION_SEPARATOR_RE = re.compile(r",\s*(?![^()]*\))")


class HealthEvaluator:
    """Classifies the state of one controller into summary, faults and warnings"""

    def __init__(self, config: Optional[HealthCheckConfig] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or HealthCheckConfig()
        self.logger = logger or logging.getLogger(__name__)

    def evaluate(self, utility: str, controller: Controller, topology: TopologySummary,
                 virtual_drives: Dict, physical_drives: Dict[SlotAddress, PhysicalDrive],
                 enclosures: List[Enclosure]) -> ControllerReport:
        """Run every rule for one controller

        Returns:
            ControllerReport; ``has_problems`` is the controller verdict
        """
        report = ControllerReport(utility=utility, controller=controller)

        for finding in self.check_controller(controller):
            report.add(finding)
        for finding in topology.missing_faults:
            report.add(finding)
        for vd in virtual_drives.values():
            for finding in self.check_virtual_drive(vd):
                report.add(finding)
        for finding in self.check_physical_drives(controller, physical_drives):
            report.add(finding)
        for finding in self.check_enclosures(controller, enclosures):
            report.add(finding)

        return report

    def check_controller(self, controller: Controller) -> List[Finding]:
        """Overview counters and battery backup status"""
        findings = []

        if controller.drive_groups_not_optimal:
            findings.append(Finding(
                Severity.SUMMARY,
                f"{controller.drive_groups_not_optimal} of {controller.drive_groups} Drive groups NOT OK",
            ))
        if controller.virtual_drives_not_optimal:
            findings.append(Finding(
                Severity.SUMMARY,
                f"{controller.virtual_drives_not_optimal} of {controller.virtual_drives} Virtual drives NOT OK",
            ))

        bbu = translate(controller.bbu)
        if bbu and bbu not in ACCEPTED_BBU_STATES:
            findings.append(Finding(Severity.SUMMARY, f"BBU {bbu}"))

        return findings

    def check_virtual_drive(self, vd: VirtualDrive) -> List[Finding]:
        """State, access, active operations, background init and consistency"""
        findings = []

        if vd.state != "Optl":
            findings.append(Finding(Severity.FAULT, f"{vd.label} {translate(vd.state)}"))

        if vd.access != "RW":
            findings.append(Finding(Severity.FAULT, f"{vd.label} access {translate(vd.access)}"))

        operations = [op.strip() for op in OPERATION_SEPARATOR_RE.split(vd.active_operations) if op.strip()]
        operations = [op for op in operations if op != "None"]
        if operations and not all(BACKGROUND_INIT in op.lower() for op in operations):
            findings.append(Finding(Severity.FAULT, f"{vd.label} active operation {vd.active_operations}"))

        # Inconsistency is expected while background init is running
        if vd.bgi_in_progress:
            message = f"{vd.label} Background Initialization"
            if vd.bgi_progress is not None:
                message += f" {vd.bgi_progress}%"
            if vd.bgi_eta is not None:
                message += f" ETA {vd.bgi_eta}"
            findings.append(Finding(Severity.FAULT, message))
        elif vd.consistent != "Yes":
            findings.append(Finding(Severity.FAULT, f"{vd.label} NOT Consistent"))

        return findings

    def check_physical_drives(self, controller: Controller,
                              physical_drives: Dict[SlotAddress, PhysicalDrive]) -> List[Finding]:
        """Drive states, secondary counters and the per-controller drive tallies"""
        findings = []
        unused = rebuilding = not_ok = 0

        if len(physical_drives) != controller.physical_drives:
            self.logger.info(
                f"Controller {controller.index} reports {controller.physical_drives} drives, "
                f"{len(physical_drives)} found in the drive list"
            )

        for drive in physical_drives.values():
            if drive.state in HEALTHY_DRIVE_STATES:
                pass
            elif drive.state == UNUSED_DRIVE_STATE:
                unused += 1
                findings.append(Finding(Severity.WARNING, f"Drive {drive.address} Unused"))
            else:
                if drive.state == REBUILDING_DRIVE_STATE:
                    rebuilding += 1
                else:
                    not_ok += 1
                message = f"Drive {drive.address} {translate(drive.state)}"
                if drive.rebuild_progress:
                    message += f" {drive.rebuild_progress}%"
                findings.append(Finding(Severity.FAULT, message))
                continue

            findings.extend(self._check_drive_counters(drive))

        total = controller.physical_drives
        if unused:
            findings.append(Finding(Severity.SUMMARY, f"{unused} of {total} drives Unused"))
        if rebuilding:
            findings.append(Finding(Severity.SUMMARY, f"{rebuilding} of {total} drives Rebuilding"))
        if not_ok:
            findings.append(Finding(Severity.SUMMARY, f"{not_ok} of {total} drives NOT OK"))

        return findings

    def _check_drive_counters(self, drive: PhysicalDrive) -> List[Finding]:
        findings = []

        if drive.smart_alert is not None and drive.smart_alert != "No":
            findings.append(Finding(Severity.FAULT, f"Drive {drive.address} S.M.A.R.T alert {drive.smart_alert}"))

        if drive.predictive_failures > self.config.predictive_failure_threshold:
            findings.append(Finding(
                Severity.FAULT, f"Drive {drive.address} Predictive Failures {drive.predictive_failures}"))

        if drive.media_errors > self.config.media_error_threshold:
            findings.append(Finding(Severity.FAULT, f"Drive {drive.address} Media Errors {drive.media_errors}"))

        return findings

    def check_enclosures(self, controller: Controller, enclosures: List[Enclosure]) -> List[Finding]:
        """Every enclosure must report status OK"""
        findings = []
        try:
            for enclosure in enclosures:
                if enclosure.status is None:
                    raise MissingFieldWarning(f"Enclosure {enclosure.label} has no status")
                if enclosure.status != "OK":
                    findings.append(Finding(Severity.FAULT, f"Enclosure {enclosure.label} {enclosure.status}"))
        except MissingFieldWarning as e:
            self.logger.warning(f"Controller {controller.index}: {e}, skipping remaining enclosure checks")
        return findings
