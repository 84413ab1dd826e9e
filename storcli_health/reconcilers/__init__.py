"""Reconcilers turning raw storcli responses into one record per entity"""

from .controller import ControllerReconciler
from .topology import TopologyReconciler
from .virtual_drives import VirtualDriveReconciler
from .physical_drives import PhysicalDriveReconciler
from .enclosures import EnclosureReconciler

__all__ = [
    "ControllerReconciler",
    "TopologyReconciler",
    "VirtualDriveReconciler",
    "PhysicalDriveReconciler",
    "EnclosureReconciler",
]
