"""Plain text rendering of controller reports"""

import sys
from typing import List, Optional, TextIO

from .models import ControllerReport, Severity

PREFIXES = {
    Severity.SUMMARY: "",
    Severity.FAULT: "FAULT: ",
    Severity.WARNING: "WARNING: ",
}


class ReportRenderer:
    """Prints one block per controller that has findings, nothing otherwise"""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def format(self, report: ControllerReport) -> List[str]:
        """Lines of one controller block, empty for a healthy controller"""
        if not report.has_problems:
            return []

        controller = report.controller
        header = f"{report.utility} controller {controller.index}"
        if controller.model:
            header += f" ({controller.model})"

        lines = [f"{header}:"]
        for finding in report.findings:
            lines.append(f"  {PREFIXES[finding.severity]}{finding.message}")
        return lines

    def render(self, reports: List[ControllerReport]) -> int:
        """Print all reports with findings, separated by blank lines

        Returns:
            Number of controller blocks printed
        """
        printed = 0
        for report in reports:
            lines = self.format(report)
            if not lines:
                continue
            if printed:
                print(file=self.stream)
            print("\n".join(lines), file=self.stream)
            printed += 1
        return printed
