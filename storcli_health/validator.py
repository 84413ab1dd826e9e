"""Shape validation of decoded storcli responses"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from .errors import SchemaError, UnavailableError

module_logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Validated response of one utility command"""

    command: str
    response_data: Union[Dict[str, Any], List[Any]]

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a key of a mapping response"""
        if isinstance(self.response_data, dict):
            return self.response_data.get(key, default)
        return default


def _first_controller(raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Return ``Controllers[0]`` or an empty dict"""
    if not isinstance(raw, dict):
        return {}
    controllers = raw.get("Controllers")
    if not isinstance(controllers, list) or not controllers:
        return {}
    first = controllers[0]
    return first if isinstance(first, dict) else {}


def validate(raw: Optional[Dict[str, Any]], command: str,
             logger: Optional[logging.Logger] = None) -> CommandResult:
    """Validate a per-controller detail response

    Args:
        raw: Decoded JSON, or None when the command was unavailable
        command: Command string, used in diagnostics
        logger: Logger for diagnostics, the module logger by default

    Returns:
        CommandResult wrapping ``Controllers[0]['Response Data']``

    Raises:
        UnavailableError: If the command failed or the response data is empty
    """
    if raw is None:
        raise UnavailableError(command, "command unavailable")

    controller = _first_controller(raw)
    status = controller.get("Command Status", {})
    if isinstance(status, dict) and status.get("Status", "Success") != "Success":
        logger = logger or module_logger
        logger.debug(f"{command} reported status {status.get('Status')}: {status.get('Description', '')}")

    response_data = controller.get("Response Data")
    if not response_data:
        raise UnavailableError(command, "no Response Data")

    return CommandResult(command=command, response_data=response_data)


def validate_controller_count(raw: Dict[str, Any], command: str = "show") -> CommandResult:
    """Validate the controller enumeration response

    Raises:
        SchemaError: If ``Number of Controllers`` is missing
    """
    response_data = _first_controller(raw).get("Response Data")
    if not isinstance(response_data, dict) or "Number of Controllers" not in response_data:
        raise SchemaError(
            f"'{command}' output has no Controllers[0]['Response Data']['Number of Controllers']; "
            "the utility output format has changed"
        )
    return CommandResult(command=command, response_data=response_data)
