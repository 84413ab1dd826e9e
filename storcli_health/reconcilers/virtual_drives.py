"""Virtual drive reconciliation"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from ..models import SlotAddress, VirtualDrive

VD_KEY_RE = re.compile(r"^/c(\d+)/v(\d+)$")
VD_PROPERTIES_RE = re.compile(r"^VD(\d+) Properties$")
VD_MEMBERS_RE = re.compile(r"^PDs for VD (\d+)$")

VDKey = Tuple[str, int]


def _first_row(value: Any) -> Dict[str, Any]:
    """Info and bgi entries are lists holding a single row"""
    if isinstance(value, list):
        return value[0] if value and isinstance(value[0], dict) else {}
    return value if isinstance(value, dict) else {}


def _optional(value: Any) -> Optional[str]:
    if value is None or str(value).strip() in ("", "-"):
        return None
    return str(value).strip()


class VirtualDriveBuilder:
    """Accumulates the partial views of one virtual drive"""

    def __init__(self, controller: str, index: int):
        self.controller = controller
        self.index = index
        self.info: Dict[str, Any] = {}
        self.properties: Dict[str, Any] = {}
        self.members: List[Dict[str, Any]] = []
        self.bgi: Dict[str, Any] = {}

    def build(self) -> VirtualDrive:
        """Finalize the record, defaulting sections no command reported"""
        members = []
        for member in self.members:
            address = SlotAddress.from_eid_slot(self.controller, member.get("EID:Slt", ""))
            if address:
                members.append(address)

        return VirtualDrive(
            controller=self.controller,
            index=self.index,
            name=str(self.info.get("Name", "")).strip(),
            raid_type=str(self.info.get("TYPE", "")),
            size=str(self.info.get("Size", "")),
            state=str(self.info.get("State", "")),
            access=str(self.info.get("Access", "")),
            active_operations=str(self.properties.get("Active Operations", "None")).strip() or "None",
            consistent=str(self.info.get("Consist", "")),
            bgi_status=str(self.bgi.get("Status", "")).strip(),
            bgi_progress=_optional(self.bgi.get("Progress%")),
            bgi_eta=_optional(self.bgi.get("Estimated Time Left")),
            members=sorted(members, key=lambda a: a.sort_key),
        )


class VirtualDriveReconciler:
    """Merges VD info, properties, membership and background init state"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def reconcile(self, info_rows: Dict[str, Any],
                  properties_by_index: Dict[int, Dict[str, Any]],
                  pd_membership_by_index: Dict[int, List[Dict[str, Any]]],
                  bgi_rows: List[Dict[str, Any]]) -> Dict[VDKey, VirtualDrive]:
        """Compose one VirtualDrive per '/cN/vM' key

        Args:
            info_rows: Mapping of response keys to VD info; keys that are not
                '/c<ctrl>/v<index>' are ignored
            properties_by_index: 'VDn Properties' sections by VD index
            pd_membership_by_index: 'PDs for VD n' rows by VD index
            bgi_rows: Rows of the background initialization status command

        Returns:
            Dict keyed by (controller, VD index) in sorted order
        """
        builders: Dict[VDKey, VirtualDriveBuilder] = {}

        for key, value in info_rows.items():
            match = VD_KEY_RE.match(key)
            if not match:
                continue
            controller, index = match.group(1), int(match.group(2))
            builder = VirtualDriveBuilder(controller, index)
            builder.info = _first_row(value)
            builders[(controller, index)] = builder

        bgi_by_index = {}
        for row in bgi_rows or []:
            try:
                bgi_by_index[int(row.get("VD"))] = row
            except (TypeError, ValueError, AttributeError):
                self.logger.debug(f"Ignoring background init row without VD index: {row}")

        for (controller, index), builder in builders.items():
            builder.properties = properties_by_index.get(index) or {}
            builder.members = pd_membership_by_index.get(index) or []
            builder.bgi = bgi_by_index.get(index) or {}

        virtual_drives = {key: builders[key].build() for key in sorted(builders)}
        self.logger.debug(f"Reconciled {len(virtual_drives)} virtual drives")
        return virtual_drives

    def reconcile_responses(self, vall_data: Dict[str, Any],
                            bgi_data: Any) -> Dict[VDKey, VirtualDrive]:
        """Split the raw '/cN/vall show all' and 'show bgi' responses and reconcile them"""
        if not isinstance(vall_data, dict):
            vall_data = {}
        properties_by_index: Dict[int, Dict[str, Any]] = {}
        pd_membership_by_index: Dict[int, List[Dict[str, Any]]] = {}

        for key, value in vall_data.items():
            properties_match = VD_PROPERTIES_RE.match(key)
            if properties_match and isinstance(value, dict):
                properties_by_index[int(properties_match.group(1))] = value
                continue
            members_match = VD_MEMBERS_RE.match(key)
            if members_match and isinstance(value, list):
                pd_membership_by_index[int(members_match.group(1))] = value

        bgi_rows: List[Dict[str, Any]] = []
        if isinstance(bgi_data, dict):
            bgi_rows = bgi_data.get("VD Operation Status") or []
        elif isinstance(bgi_data, list):
            bgi_rows = bgi_data

        return self.reconcile(vall_data, properties_by_index, pd_membership_by_index,
                              [row for row in bgi_rows if isinstance(row, dict)])
