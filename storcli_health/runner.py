"""Execution of storcli/perccli commands"""

import json
import logging
import os
import shutil
import subprocess
from typing import Any, Dict, List, Optional


class CommandRunner:
    """Runs one storcli-compatible utility and decodes its JSON output

    Every failure mode (binary not found, timeout, empty or undecodable
    output) is reported as ``None`` meaning "command unavailable".
    """

    def __init__(self, utility: str, search_paths: Optional[List[str]] = None,
                 timeout: int = 60, logger: Optional[logging.Logger] = None):
        """Initialize the runner

        Args:
            utility: Binary name, e.g. 'storcli64'
            search_paths: Directories searched after PATH
            timeout: Seconds before a command is abandoned
            logger: Logger instance
        """
        self.utility = utility
        self.search_paths = search_paths or []
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.binary = self._find_binary()

    def _find_binary(self) -> str:
        """Locate the utility on PATH or in the configured search paths"""
        directories = [os.environ.get("PATH", "")] + list(self.search_paths)
        found = shutil.which(self.utility, path=os.pathsep.join(d for d in directories if d))
        if found:
            self.logger.debug(f"Found {self.utility} at {found}")
        return found or ""

    def is_available(self) -> bool:
        """Check if the utility binary exists"""
        return bool(self.binary)

    def run(self, args: List[str]) -> Optional[Dict[str, Any]]:
        """Run the utility with JSON output and return the decoded result

        Args:
            args: Command arguments without the trailing 'J'

        Returns:
            Decoded JSON, or None when the command is unavailable
        """
        if not self.binary:
            return None

        cmd = [self.binary] + list(args) + ["J"]
        self.logger.debug(f"Executing command: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE,
                                    timeout=self.timeout)
        except subprocess.TimeoutExpired:
            self.logger.debug(f"{' '.join(cmd)} timed out after {self.timeout}s")
            return None
        except OSError as e:
            self.logger.debug(f"Error executing command {' '.join(cmd)}: {e}")
            return None

        # storcli exits non-zero for failed sub-commands but still prints JSON
        if result.returncode != 0:
            self.logger.debug(f"{' '.join(cmd)} exited with status {result.returncode}")

        return self._parse_json_output(result.stdout)

    def _parse_json_output(self, output_bytes: bytes) -> Optional[Dict[str, Any]]:
        """Decode JSON output, returning None on failure"""
        try:
            output = output_bytes.decode('utf-8')
        except UnicodeDecodeError:
            self.logger.debug("utf-8 decoding failed, falling back to latin-1")
            output = output_bytes.decode('latin-1')

        if not output.strip():
            return None

        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            self.logger.debug(f"Failed to parse {self.utility} JSON output: {e}")
            self.logger.debug(f"Raw output: {output[:200]}...")
            return None
