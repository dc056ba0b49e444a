"""
Execution framework for command-line entry points.

Provides a base class that loads configuration, sets up logging and handles
interrupts and unexpected errors the same way for every script.
"""

import logging
import sys
from abc import ABC, abstractmethod
from argparse import ArgumentParser, Namespace
from typing import List, Optional

from llmbatch.config.loader import ConfigLoader, get_config_loader
from llmbatch.config.manager import ConfigManager
from llmbatch.core.logger import set_console_level, setup_logger


class BatchScript(ABC):
    """
    Base class for command-line scripts.

    This class handles:
    - Configuration loading
    - Logger setup
    - Common error handling

    Subclasses must implement:
    - create_argument_parser(): Return configured ArgumentParser
    - run_cli(): Execute the workflow and return a process exit code
    """

    def __init__(self, script_name: str):
        """
        Initialize the script.

        Args:
            script_name: Name of the script for logging purposes
        """
        self.script_name = script_name
        self.logger = setup_logger(script_name)
        self.config_loader: Optional[ConfigLoader] = None
        self.config_manager: Optional[ConfigManager] = None
        self.quiet: bool = False

    def initialize_config(self) -> None:
        """Load all configuration resources."""
        self.config_loader = get_config_loader()
        self.config_manager = ConfigManager(self.config_loader)

    @abstractmethod
    def create_argument_parser(self) -> ArgumentParser:
        """
        Create and configure the argument parser.

        Returns:
            Configured ArgumentParser instance
        """
        pass

    @abstractmethod
    def run_cli(self, args: Namespace) -> int:
        """
        Execute the workflow with parsed arguments.

        Args:
            args: Parsed command-line arguments

        Returns:
            Process exit code
        """
        pass

    def execute(self, argv: Optional[List[str]] = None) -> None:
        """
        Main entry point: load configuration, parse arguments, run, exit.

        Exits with the code returned by run_cli(), 130 on interrupt and 1 on
        unexpected errors.
        """
        try:
            self.initialize_config()
            parser = self.create_argument_parser()
            args = parser.parse_args(argv)
            self.quiet = bool(getattr(args, "quiet", False))
            if getattr(args, "verbose", False):
                set_console_level(self.logger, logging.INFO)
            self.logger.info(f"Starting {self.script_name}")
            exit_code = self.run_cli(args)
        except KeyboardInterrupt:
            self._handle_interrupt()
        except Exception as e:
            self._handle_error(e)
        else:
            sys.exit(exit_code)

    def _handle_interrupt(self) -> None:
        """Handle keyboard interrupt gracefully."""
        print("\n[INFO] Operation cancelled by user.")
        self.logger.info(f"{self.script_name} cancelled by user")
        sys.exit(130)

    def _handle_error(self, error: Exception) -> None:
        """
        Handle unexpected errors gracefully.

        Args:
            error: The exception that was raised
        """
        print(f"[ERROR] Unexpected error: {error}")
        self.logger.error(f"{self.script_name} failed", exc_info=error)
        sys.exit(1)

    def print_or_log(self, message: str, level: str = "info") -> None:
        """
        Print a tagged message to the console and log it.

        Args:
            message: Message to display/log
            level: Log level (info, warning, error, success)
        """
        if not (self.quiet and level in ("info", "success")):
            print(f"[{level.upper()}] {message}")

        log_method = getattr(self.logger, "info" if level == "success" else level.lower(), self.logger.info)
        log_method(message)
