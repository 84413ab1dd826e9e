"""Data models for storcli health evaluation"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


DEFAULT_UTILITY_SEARCH_ORDER = ["storcli64", "storcli", "perccli64", "perccli"]
DEFAULT_SEARCH_PATHS = ["/opt/MegaRAID/storcli", "/opt/MegaRAID/perccli", "/opt/lsi/storcli"]
DEFAULT_THRESHOLDS = {"media_errors": 10, "predictive_failures": 0}


class Severity(Enum):
    """Finding classes, in rendering order"""

    SUMMARY = "summary"
    FAULT = "fault"
    WARNING = "warning"


@dataclass(frozen=True)
class SlotAddress:
    """Compound key of a physical drive slot"""

    controller: str                  # Controller index
    enclosure: str                   # Enclosure ID, empty for direct-attached drives
    slot: str                        # Slot number within enclosure

    @classmethod
    def from_eid_slot(cls, controller: str, eid_slt: str) -> Optional["SlotAddress"]:
        """Build an address from an ``EID:Slt`` field such as ``252:4``"""
        if not eid_slt or ":" not in str(eid_slt):
            return None
        enclosure, slot = str(eid_slt).split(":", 1)
        enclosure, slot = enclosure.strip(), slot.strip()
        if not slot.isdigit() or (enclosure and not enclosure.isdigit()):
            return None
        return cls(str(controller), enclosure, slot)

    @property
    def sort_key(self) -> tuple:
        """Numeric ordering key"""
        return (int(self.controller), int(self.enclosure or -1), int(self.slot))

    @property
    def path(self) -> str:
        """Address in storcli object notation"""
        if self.enclosure:
            return f"/c{self.controller}/e{self.enclosure}/s{self.slot}"
        return f"/c{self.controller}/s{self.slot}"

    def __str__(self) -> str:
        return self.path


@dataclass
class Controller:
    """Controller overview row from the enumeration command"""

    index: str                       # Controller index (Ctl)
    model: str = ""                  # Model name
    health: str = ""                 # Overall health acronym (Hlth)
    physical_drives: int = 0         # PDs
    drive_groups: int = 0            # DGs
    drive_groups_not_optimal: int = 0    # DNOpt
    virtual_drives: int = 0          # VDs
    virtual_drives_not_optimal: int = 0  # VNOpt
    bbu: str = ""                    # Battery backup status

    def to_dict(self) -> dict:
        """Convert controller to dictionary representation"""
        return {
            "index": self.index,
            "model": self.model,
            "health": self.health,
            "physical_drives": self.physical_drives,
            "drive_groups": self.drive_groups,
            "drive_groups_not_optimal": self.drive_groups_not_optimal,
            "virtual_drives": self.virtual_drives,
            "virtual_drives_not_optimal": self.virtual_drives_not_optimal,
            "bbu": self.bbu,
        }


@dataclass
class TopologyEntry:
    """One row of the controller topology listing"""

    controller: str
    drive_group: str
    array: str
    row: str
    state: str
    eid_slot: str = ""

    @property
    def is_array_aggregate(self) -> bool:
        """Array level rows carry numeric DG and Arr but no row"""
        return self.drive_group.isdigit() and self.array.isdigit() and self.row == "-"

    def to_dict(self) -> dict:
        return {
            "controller": self.controller,
            "drive_group": self.drive_group,
            "array": self.array,
            "row": self.row,
            "state": self.state,
            "eid_slot": self.eid_slot,
        }


@dataclass
class TopologySummary:
    """Outcome of reconciling the topology listing"""

    rebuilding_count: int = 0
    missing_faults: List["Finding"] = field(default_factory=list)
    entries: List[TopologyEntry] = field(default_factory=list)


@dataclass
class VirtualDrive:
    """Represents a virtual drive assembled from the per-VD commands"""

    controller: str                  # Controller index
    index: int                       # VD index
    name: str = ""                   # Display name
    raid_type: str = ""              # RAID level (TYPE)
    size: str = ""
    state: str = ""                  # State acronym (Optl, Dgrd, ...)
    access: str = ""                 # Access mode acronym (RW, RO, ...)
    active_operations: str = "None"  # Active operation description
    consistent: str = ""             # Consist flag (Yes/No)
    bgi_status: str = ""             # Background init status, empty when unknown
    bgi_progress: Optional[str] = None
    bgi_eta: Optional[str] = None
    members: List[SlotAddress] = field(default_factory=list)

    @property
    def key(self) -> str:
        """Storcli object path of this VD"""
        return f"/c{self.controller}/v{self.index}"

    @property
    def label(self) -> str:
        """Human-readable identification for messages"""
        if self.name:
            return f"VD {self.key} ({self.name})"
        return f"VD {self.key}"

    @property
    def bgi_in_progress(self) -> bool:
        return self.bgi_status.lower() == "in progress"

    def to_dict(self) -> dict:
        """Convert virtual drive to dictionary representation"""
        return {
            "key": self.key,
            "name": self.name,
            "type": self.raid_type,
            "size": self.size,
            "state": self.state,
            "access": self.access,
            "active_operations": self.active_operations,
            "consistent": self.consistent,
            "bgi_status": self.bgi_status,
            "bgi_progress": self.bgi_progress,
            "bgi_eta": self.bgi_eta,
            "members": [str(member) for member in self.members],
        }


@dataclass
class PhysicalDrive:
    """Represents a physical drive present in the controller's PD list"""

    address: SlotAddress
    state: str                       # State acronym (Onln, UGood, Rbld, ...)
    rebuild_progress: Optional[str] = None   # Rebuild percentage when rebuilding
    smart_alert: Optional[str] = None        # S.M.A.R.T alert flag (Yes/No)
    predictive_failures: int = 0     # Predictive Failure Count
    media_errors: int = 0            # Media Error Count
    model: str = ""

    def to_dict(self) -> dict:
        """Convert physical drive to dictionary representation"""
        return {
            "address": str(self.address),
            "state": self.state,
            "rebuild_progress": self.rebuild_progress,
            "smart_alert": self.smart_alert,
            "predictive_failures": self.predictive_failures,
            "media_errors": self.media_errors,
            "model": self.model,
        }


@dataclass
class Enclosure:
    """Represents an enclosure and its reported status"""

    label: str                       # Normalized label, e.g. /c0/e252
    status: Optional[str] = None     # Raw status string, None when absent

    def to_dict(self) -> dict:
        return {"label": self.label, "status": self.status}


@dataclass
class Finding:
    """A single evaluation result line"""

    severity: Severity
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class ControllerReport:
    """Findings gathered for one controller of one utility flavor"""

    utility: str
    controller: Controller
    summary: List[Finding] = field(default_factory=list)
    faults: List[Finding] = field(default_factory=list)
    warnings: List[Finding] = field(default_factory=list)

    def add(self, finding: Finding) -> None:
        """Append a finding to the list matching its severity"""
        if finding.severity is Severity.SUMMARY:
            self.summary.append(finding)
        elif finding.severity is Severity.FAULT:
            self.faults.append(finding)
        else:
            self.warnings.append(finding)

    @property
    def findings(self) -> List[Finding]:
        """All findings ordered summary, faults, warnings"""
        return self.summary + self.faults + self.warnings

    @property
    def has_problems(self) -> bool:
        return bool(self.summary or self.faults or self.warnings)


def _string_list(key: str, value) -> List[str]:
    """A single string stands for a one-element list"""
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ValueError(f"{key} must be a string or a list, got {type(value).__name__}")
    return [str(item) for item in value]


@dataclass
class HealthCheckConfig:
    """Runtime options for a health check run"""

    debug_output: bool = False
    utility_search_order: List[str] = field(default_factory=lambda: list(DEFAULT_UTILITY_SEARCH_ORDER))
    search_paths: List[str] = field(default_factory=lambda: list(DEFAULT_SEARCH_PATHS))
    command_timeout: int = 60
    thresholds: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_THRESHOLDS))

    @property
    def media_error_threshold(self) -> int:
        return self.thresholds.get("media_errors", DEFAULT_THRESHOLDS["media_errors"])

    @property
    def predictive_failure_threshold(self) -> int:
        return self.thresholds.get("predictive_failures", DEFAULT_THRESHOLDS["predictive_failures"])

    def to_dict(self) -> dict:
        """Convert config to dictionary representation"""
        return {
            "debug_output": self.debug_output,
            "utility_search_order": list(self.utility_search_order),
            "search_paths": list(self.search_paths),
            "command_timeout": self.command_timeout,
            "thresholds": dict(self.thresholds),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HealthCheckConfig":
        """Create HealthCheckConfig from dictionary, keeping defaults for absent keys"""
        config = cls()
        if "debug_output" in data:
            config.debug_output = bool(data["debug_output"])
        if data.get("utility_search_order"):
            config.utility_search_order = _string_list("utility_search_order", data["utility_search_order"])
        if "search_paths" in data and data["search_paths"] is not None:
            config.search_paths = _string_list("search_paths", data["search_paths"])
        if "command_timeout" in data:
            config.command_timeout = int(data["command_timeout"])
        for metric, value in (data.get("thresholds") or {}).items():
            config.thresholds[str(metric)] = int(value)
        return config
