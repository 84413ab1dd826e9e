"""Controller overview extraction"""

import logging
from typing import Any, Dict, Optional

from ..errors import SchemaError, UnavailableError
from ..models import Controller
from ..validator import CommandResult


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class ControllerReconciler:
    """Reads controller count and per-controller overview rows"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def controller_count(self, result: CommandResult) -> int:
        """Number of controllers reported by the enumeration command

        Raises:
            SchemaError: If the count is not an integer
        """
        value = result.get("Number of Controllers")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise SchemaError(f"'Number of Controllers' is not a number: {value!r}")

    def reconcile(self, result: CommandResult, index: int) -> Controller:
        """Build the Controller record for one controller index

        Raises:
            UnavailableError: If the overview has no row for the controller
        """
        overview = result.get("System Overview") or []
        row: Dict[str, Any] = {}
        for entry in overview:
            if isinstance(entry, dict) and str(entry.get("Ctl")) == str(index):
                row = entry
                break

        if not row:
            raise UnavailableError(result.command, f"no System Overview row for controller {index}")

        controller = Controller(
            index=str(index),
            model=str(row.get("Model", "")).strip(),
            health=str(row.get("Hlth", "")),
            physical_drives=_to_int(row.get("PDs")),
            drive_groups=_to_int(row.get("DGs")),
            drive_groups_not_optimal=_to_int(row.get("DNOpt")),
            virtual_drives=_to_int(row.get("VDs")),
            virtual_drives_not_optimal=_to_int(row.get("VNOpt")),
            bbu=str(row.get("BBU", "")),
        )
        self.logger.debug(f"Controller overview: {controller}")
        return controller
