"""Exceptions raised while collecting and evaluating controller state"""


class StorcliHealthError(Exception):
    """Base class for health check errors"""


class SchemaError(StorcliHealthError):
    """The utility output no longer matches the known layout; the run must stop"""


class UnavailableError(StorcliHealthError):
    """A detail command produced no usable output for one controller"""

    def __init__(self, command: str, reason: str = "no output"):
        self.command = command
        self.reason = reason
        super().__init__(f"{command}: {reason}")


class MissingFieldWarning(StorcliHealthError):
    """An expected sub-field is absent; only the affected check is abandoned"""
