"""Main StorcliHealthCheck class"""

import argparse
import json
import logging
import os
import sys
from typing import Callable, List, Optional

from .config import ConfigManager, DEFAULT_CONFIG_FILE
from .errors import SchemaError, UnavailableError
from .evaluator import HealthEvaluator
from .models import ControllerReport, HealthCheckConfig
from .reconcilers import (ControllerReconciler, EnclosureReconciler, PhysicalDriveReconciler,
                          TopologyReconciler, VirtualDriveReconciler)
from .report import ReportRenderer
from .runner import CommandRunner
from .validator import CommandResult, validate, validate_controller_count

EXIT_CLEAN = 0
EXIT_PROBLEMS = 1
EXIT_SCHEMA_ERROR = 2


class StorcliHealthCheck:
    """Main class for the storcli health check

    Orchestrates, per utility flavor and per controller:
    - Command execution (storcli64, storcli, perccli64, perccli)
    - Reconciliation of the command outputs
    - Rule evaluation
    - Report rendering
    """

    def __init__(self, config: Optional[HealthCheckConfig] = None,
                 runner_factory: Optional[Callable[[str], CommandRunner]] = None,
                 renderer: Optional[ReportRenderer] = None):
        """Initialize the health check

        Args:
            config: Configuration; loaded from the config file by run() when omitted
            runner_factory: Creates a CommandRunner for a utility name
            renderer: Report renderer, prints to stdout by default
        """
        # Options
        self.config_file = DEFAULT_CONFIG_FILE
        self.quiet = False

        self.logger = self._setup_logger()
        self.config = config
        self.runner_factory = runner_factory or self._default_runner
        self.renderer = renderer or ReportRenderer()

        # Components
        self.controller_reconciler = ControllerReconciler(logger=self.logger)
        self.topology_reconciler = TopologyReconciler(logger=self.logger)
        self.vd_reconciler = VirtualDriveReconciler(logger=self.logger)
        self.pd_reconciler = PhysicalDriveReconciler(logger=self.logger)
        self.enclosure_reconciler = EnclosureReconciler(logger=self.logger)

    def _setup_logger(self) -> logging.Logger:
        """Set up the logger for the application"""
        logger = logging.getLogger("storcli-health")
        logger.setLevel(logging.WARNING)

        if not logger.handlers:
            ch = logging.StreamHandler()
            ch.setLevel(logging.DEBUG)

            formatter = logging.Formatter('[%(levelname)s] %(message)s')
            ch.setFormatter(formatter)

            logger.addHandler(ch)

        return logger

    def _default_runner(self, utility: str) -> CommandRunner:
        return CommandRunner(utility, search_paths=self.config.search_paths,
                             timeout=self.config.command_timeout, logger=self.logger)

    def parse_arguments(self, argv: Optional[List[str]] = None) -> None:
        """Parse command line arguments and merge them into the configuration"""
        parser = argparse.ArgumentParser(
            description="Checks LSI/Broadcom MegaRAID controllers via storcli or perccli. "
                        "Prints nothing and exits 0 when everything is healthy."
        )

        parser.add_argument("-c", "--config", default=DEFAULT_CONFIG_FILE, metavar="FILE",
                            help="YAML configuration file")
        parser.add_argument("-d", "--debug", action="store_true",
                            help="Dump reconciled controller state to stderr")
        parser.add_argument("-q", "--quiet", action="store_true", help="Suppress warning messages")
        parser.add_argument("-u", "--utility", action="append", metavar="NAME",
                            help="Utility binary to try (repeatable, replaces the default search order)")
        parser.add_argument("--media-errors", type=int, metavar="N",
                            help="Fault when a drive's media error count exceeds N")
        parser.add_argument("--predictive-failures", type=int, metavar="N",
                            help="Fault when a drive's predictive failure count exceeds N")
        parser.add_argument("--timeout", type=int, metavar="SECONDS",
                            help="Timeout for each utility command")

        args = parser.parse_args(argv)

        self.config_file = args.config
        self.quiet = args.quiet

        if self.config is None:
            self.config = ConfigManager(self.config_file, logger=self.logger).config

        if args.debug:
            self.config.debug_output = True
        if args.utility:
            self.config.utility_search_order = args.utility
        if args.media_errors is not None:
            self.config.thresholds["media_errors"] = args.media_errors
        if args.predictive_failures is not None:
            self.config.thresholds["predictive_failures"] = args.predictive_failures
        if args.timeout is not None:
            self.config.command_timeout = args.timeout

    def _configure_log_level(self) -> None:
        if self.config.debug_output:
            self.logger.setLevel(logging.DEBUG)
        elif self.quiet:
            self.logger.setLevel(logging.ERROR)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Main entry point for the application

        Returns:
            Process exit status
        """
        self.parse_arguments(argv)
        self._configure_log_level()

        try:
            reports = self.check()
        except SchemaError as e:
            self.logger.error(f"Unsupported utility output: {e}")
            return EXIT_SCHEMA_ERROR

        printed = self.renderer.render(reports)
        self.logger.debug(f"{printed} of {len(reports)} controllers reported problems")
        return EXIT_PROBLEMS if printed else EXIT_CLEAN

    def check(self) -> List[ControllerReport]:
        """Evaluate every controller of every responding utility flavor

        Raises:
            SchemaError: If a controller enumeration response has drifted
        """
        if self.config is None:
            self.config = HealthCheckConfig()

        reports = []
        evaluated_binaries = set()
        for utility in self.config.utility_search_order:
            runner = self.runner_factory(utility)
            if not runner.is_available():
                self.logger.debug(f"{utility} not found")
                continue

            # storcli and storcli64 are often the same binary
            binary = os.path.realpath(runner.binary)
            if binary in evaluated_binaries:
                self.logger.debug(f"{utility} already evaluated as {binary}")
                continue
            evaluated_binaries.add(binary)

            reports.extend(self.evaluate_utility(utility, runner))
        return reports

    def evaluate_utility(self, utility: str, runner: CommandRunner) -> List[ControllerReport]:
        """Enumerate the controllers of one utility and evaluate each of them"""
        raw = runner.run(["show"])
        if raw is None:
            self.logger.debug(f"{utility} did not answer the controller enumeration, skipping")
            return []

        overview = validate_controller_count(raw, f"{utility} show")
        count = self.controller_reconciler.controller_count(overview)
        self.logger.debug(f"{utility} reports {count} controllers")

        reports = []
        for index in range(count):
            try:
                reports.append(self.evaluate_controller(utility, runner, overview, index))
            except UnavailableError as e:
                self.logger.warning(f"{utility} controller {index}: {e}, skipping controller")
        return reports

    def _detail(self, runner: CommandRunner, args: List[str]) -> CommandResult:
        """Run a per-controller detail command

        Raises:
            UnavailableError: If the command produced no usable response
        """
        return validate(runner.run(args), " ".join(args), logger=self.logger)

    def evaluate_controller(self, utility: str, runner: CommandRunner,
                            overview: CommandResult, index: int) -> ControllerReport:
        """Collect, reconcile and evaluate one controller

        Commands run strictly in order since later ones depend on earlier results.

        Raises:
            UnavailableError: If any detail command fails
        """
        ctrl = f"/c{index}"
        controller = self.controller_reconciler.reconcile(overview, index)

        show_all = self._detail(runner, [ctrl, "show", "all"])
        topology = self.topology_reconciler.reconcile(show_all.get("TOPOLOGY") or [], str(index))

        virtual_drives = {}
        if show_all.get("VD LIST"):
            vall = self._detail(runner, [f"{ctrl}/vall", "show", "all"])
            bgi = self._detail(runner, [f"{ctrl}/vall", "show", "bgi"])
            virtual_drives = self.vd_reconciler.reconcile_responses(vall.response_data, bgi.response_data)
            if len(virtual_drives) != controller.virtual_drives:
                self.logger.info(
                    f"Controller {index} reports {controller.virtual_drives} virtual drives, "
                    f"{len(virtual_drives)} reconciled"
                )

        rebuild_data = None
        if topology.rebuilding_count:
            rebuild_data = self._detail(runner, [f"{ctrl}/eall/sall", "show", "rebuild"]).response_data

        details = self._detail(runner, [f"{ctrl}/eall/sall", "show", "all"])
        physical_drives = self.pd_reconciler.reconcile(
            show_all.get("PD LIST") or [], str(index), rebuild_data, details.response_data)

        enclosures = []
        # Controllers without enclosures fail the enclosure command
        if show_all.get("Enclosures", 1):
            enclosure_data = self._detail(runner, [f"{ctrl}/eall", "show", "all"])
            enclosures = self.enclosure_reconciler.reconcile(enclosure_data.response_data)

        if self.config.debug_output:
            self.logger.debug(json.dumps({
                "utility": utility,
                "controller": controller.to_dict(),
                "topology": [entry.to_dict() for entry in topology.entries],
                "rebuilding": topology.rebuilding_count,
                "virtual_drives": [vd.to_dict() for vd in virtual_drives.values()],
                "physical_drives": [pd.to_dict() for pd in physical_drives.values()],
                "enclosures": [enclosure.to_dict() for enclosure in enclosures],
            }, indent=2))

        evaluator = HealthEvaluator(self.config, logger=self.logger)
        return evaluator.evaluate(utility, controller, topology, virtual_drives,
                                  physical_drives, enclosures)


def main(argv: Optional[List[str]] = None) -> int:
    """Console script entry point"""
    return StorcliHealthCheck().run(argv)


if __name__ == "__main__":
    sys.exit(main())
