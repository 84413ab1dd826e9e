"""
Storcli Health - MegaRAID controller health evaluation

This module fuses the JSON status dumps of storcli/perccli into one model of
controller, virtual drive, physical drive and enclosure health and reports
anything that is not healthy.
"""

from .models import ControllerReport, Finding, HealthCheckConfig, Severity
from .storcli_health import StorcliHealthCheck, main

__version__ = "1.0.0"
__all__ = ["ControllerReport", "Finding", "HealthCheckConfig", "Severity", "StorcliHealthCheck", "main"]
