"""Physical drive reconciliation"""

import logging
import re
from typing import Any, Dict, List, Optional

from ..models import PhysicalDrive, SlotAddress

DRIVE_PATH_RE = re.compile(r"/c(\d+)(?:/e(\d+))?/s(\d+)")
DETAIL_KEY_RE = re.compile(r"^Drive (/c\d+(?:/e\d+)?/s\d+) - Detailed Information$")

SMART_ALERT_FIELD = "S.M.A.R.T alert flagged by drive"
PREDICTIVE_FAILURE_FIELD = "Predictive Failure Count"
MEDIA_ERROR_FIELD = "Media Error Count"


def parse_drive_path(path: str) -> Optional[SlotAddress]:
    """Parse '/c0/e252/s4' (or '/c0/s4') into a SlotAddress"""
    match = DRIVE_PATH_RE.search(str(path))
    if not match:
        return None
    return SlotAddress(match.group(1), match.group(2) or "", match.group(3))


def _count(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class PhysicalDriveReconciler:
    """Merges PD list state, rebuild progress and detailed counters per slot"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def rebuild_progress(self, rebuild_data: Any) -> Dict[SlotAddress, str]:
        """Map slot to progress percentage for drives with a rebuild in progress

        The rebuild command answers with either a list of rows or a mapping
        holding such a list.
        """
        rows: List[Any] = []
        if isinstance(rebuild_data, list):
            rows = rebuild_data
        elif isinstance(rebuild_data, dict):
            for value in rebuild_data.values():
                if isinstance(value, list):
                    rows.extend(value)

        progress = {}
        for row in rows:
            if not isinstance(row, dict):
                continue
            address = parse_drive_path(row.get("Drive-ID", ""))
            if address is None:
                self.logger.debug(f"Ignoring rebuild row without drive id: {row}")
                continue
            if str(row.get("Status", "")).lower() != "in progress":
                continue
            progress[address] = str(row.get("Progress%", "")).strip()
        return progress

    def detail_counters(self, detail_data: Dict[str, Any]) -> Dict[SlotAddress, Dict[str, Any]]:
        """Extract the '<drive> State' section of every detailed information block"""
        counters = {}
        if not isinstance(detail_data, dict):
            return counters
        for key, value in detail_data.items():
            match = DETAIL_KEY_RE.match(key)
            if not match or not isinstance(value, dict):
                continue
            drive_path = match.group(1)
            address = parse_drive_path(drive_path)
            counters[address] = value.get(f"Drive {drive_path} State") or {}
        return counters

    def reconcile(self, pd_list: List[Dict[str, Any]], controller: str,
                  rebuild_data: Any = None,
                  detail_data: Optional[Dict[str, Any]] = None) -> Dict[SlotAddress, PhysicalDrive]:
        """Compose one PhysicalDrive per slot of the PD list

        Args:
            pd_list: 'PD LIST' rows from '/cN show all'
            controller: Controller index
            rebuild_data: Response of '/cN/eall/sall show rebuild', if queried
            detail_data: Response of '/cN/eall/sall show all'

        Returns:
            Dict keyed by SlotAddress in sorted order
        """
        progress = self.rebuild_progress(rebuild_data) if rebuild_data else {}
        counters = self.detail_counters(detail_data or {})

        drives = {}
        for row in pd_list or []:
            if not isinstance(row, dict):
                continue
            address = SlotAddress.from_eid_slot(controller, row.get("EID:Slt", ""))
            if address is None:
                self.logger.debug(f"Ignoring PD list row with unparsable EID:Slt: {row}")
                continue

            state_section = counters.get(address, {})
            smart_alert = state_section.get(SMART_ALERT_FIELD)
            drives[address] = PhysicalDrive(
                address=address,
                state=str(row.get("State", "")).strip(),
                rebuild_progress=progress.get(address),
                smart_alert=str(smart_alert).strip() if smart_alert is not None else None,
                predictive_failures=_count(state_section.get(PREDICTIVE_FAILURE_FIELD)),
                media_errors=_count(state_section.get(MEDIA_ERROR_FIELD)),
                model=str(row.get("Model", "")).strip(),
            )

        self.logger.debug(f"Reconciled {len(drives)} physical drives on /c{controller}")
        return {address: drives[address] for address in sorted(drives, key=lambda a: a.sort_key)}
