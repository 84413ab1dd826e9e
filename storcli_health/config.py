"""Configuration management for the storcli health check"""

import os
import logging
from typing import Optional
import yaml

from .models import HealthCheckConfig

DEFAULT_CONFIG_FILE = "/etc/storcli_health.conf"


class ConfigManager:
    """Manages loading configuration from a YAML file"""

    def __init__(self, config_file: str = DEFAULT_CONFIG_FILE, logger: Optional[logging.Logger] = None):
        """Initialize configuration manager

        Args:
            config_file: Path to configuration file
            logger: Logger instance
        """
        self.config_file = os.path.expanduser(config_file)
        self.logger = logger or logging.getLogger(__name__)
        self.config = HealthCheckConfig()

        self.load()

    def load(self) -> HealthCheckConfig:
        """Load configuration from YAML file

        Configuration file structure:
        ```yaml
        debug_output: false
        utility_search_order:       # Binaries tried in turn
          - storcli64
          - perccli64
        search_paths:               # Searched after PATH
          - /opt/MegaRAID/storcli
        command_timeout: 60         # Seconds per command
        thresholds:
          media_errors: 10          # Fault above this Media Error Count
          predictive_failures: 0    # Fault above this Predictive Failure Count
        ```
        """
        # Unattended runs without a config file are the normal case
        if not os.path.exists(self.config_file):
            self.logger.debug(f"Configuration file {self.config_file} not found. Using default settings.")
            return self.config

        try:
            self.logger.debug(f"Loading configuration from {self.config_file}")

            with open(self.config_file, 'r') as f:
                data = yaml.safe_load(f)

            if not data:
                self.logger.warning(f"Configuration file {self.config_file} is empty")
                return self.config

            if not isinstance(data, dict):
                self.logger.error(f"Configuration file {self.config_file} must contain a mapping")
                return self.config

            self.config = HealthCheckConfig.from_dict(data)
            self.logger.debug(f"Loaded configuration: {self.config.to_dict()}")

        except yaml.YAMLError as e:
            self.logger.error(f"Error parsing YAML in configuration file: {e}")
        except IOError as e:
            self.logger.error(f"Error reading configuration file: {e}")
        except (TypeError, ValueError) as e:
            self.logger.error(f"Invalid value in configuration file: {e}")

        return self.config
