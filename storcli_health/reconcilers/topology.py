"""Topology listing reconciliation"""

import logging
from typing import Any, Dict, List, Optional

from ..acronyms import translate
from ..models import Finding, Severity, TopologyEntry, TopologySummary


class TopologyReconciler:
    """Detects rebuilding and missing drives from the TOPOLOGY table

    A drive that is missing entirely never shows up in the PD list, so its
    topology row is the only place it can be reported.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def parse(self, rows: List[Dict[str, Any]], controller: str) -> List[TopologyEntry]:
        """Convert raw TOPOLOGY rows to TopologyEntry objects"""
        entries = []
        for row in rows or []:
            if not isinstance(row, dict):
                continue
            entries.append(TopologyEntry(
                controller=str(controller),
                drive_group=str(row.get("DG", "")).strip(),
                array=str(row.get("Arr", "")).strip(),
                row=str(row.get("Row", "")).strip(),
                state=str(row.get("State", "")).strip(),
                eid_slot=str(row.get("EID:Slot", "")).strip(),
            ))
        return entries

    def reconcile(self, rows: List[Dict[str, Any]], controller: str) -> TopologySummary:
        """Count rebuilding rows and report missing drives

        Args:
            rows: Raw TOPOLOGY rows from '/cN show all'
            controller: Controller index

        Returns:
            TopologySummary with the parsed rows, the rebuild count and
            missing-drive faults
        """
        summary = TopologySummary(entries=self.parse(rows, controller))

        for entry in summary.entries:
            # Array state lags behind drive state during rebuilds
            if entry.is_array_aggregate:
                self.logger.debug(f"Ignoring array row DG {entry.drive_group} Arr {entry.array}: {entry.state}")
                continue

            if entry.state == "Rbld":
                summary.rebuilding_count += 1
            elif entry.state == "Msng":
                summary.missing_faults.append(Finding(
                    Severity.FAULT,
                    f"Drive in DG {entry.drive_group} Array {entry.array} Row {entry.row} "
                    f"is {translate(entry.state)}",
                ))

        self.logger.debug(
            f"Topology /c{controller}: {summary.rebuilding_count} rebuilding, "
            f"{len(summary.missing_faults)} missing"
        )
        return summary
