"""Enclosure status extraction"""

import logging
from typing import Any, Dict, List, Optional

from ..models import Enclosure

ENCLOSURE_PREFIX = "Enclosure "


def normalize_label(key: str) -> str:
    """'Enclosure /c0/e252  :' -> '/c0/e252'"""
    label = key[len(ENCLOSURE_PREFIX):] if key.startswith(ENCLOSURE_PREFIX) else key
    return label.rstrip().rstrip(":").rstrip()


class EnclosureReconciler:
    """Reads the status string of every enclosure of a controller"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def reconcile(self, response_data: Dict[str, Any]) -> List[Enclosure]:
        """Parse '/cN/eall show all' into Enclosure records

        An enclosure without a status keeps ``status=None``; the evaluator
        decides what to do about it.
        """
        enclosures = []
        if not isinstance(response_data, dict):
            return enclosures
        for key, value in response_data.items():
            if not key.startswith(ENCLOSURE_PREFIX) or not isinstance(value, dict):
                continue
            information = value.get("Information") or {}
            status = information.get("Status") if isinstance(information, dict) else None
            enclosures.append(Enclosure(
                label=normalize_label(key),
                status=str(status).strip() if status is not None else None,
            ))

        enclosures.sort(key=lambda e: e.label)
        self.logger.debug(f"Found {len(enclosures)} enclosures")
        return enclosures
