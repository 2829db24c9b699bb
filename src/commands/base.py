#!/usr/bin/env python3
"""
Base command class for the modular command architecture.

Provides common functionality and interface that all commands inherit.
Services come from the dependency injection container.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional
from argparse import Namespace

from core.container import Container, get_container
from core.exceptions import ProviderError, WebVitalsError

logger = logging.getLogger(__name__)


class BaseCommand(ABC):
    """
    Base class for all command endpoints.

    Exposes the container's services as properties and maps exceptions
    to exit codes.
    """

    def __init__(self, container: Optional[Container] = None):
        """
        Initialize base command with dependency injection container.

        Args:
            container: Optional container instance. If None, uses global container.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self._container = container or get_container()

    @property
    def config(self):
        return self._container.get('config')

    @property
    def analyzer(self):
        return self._container.get('analyzer')

    @property
    def history_store(self):
        return self._container.get('history_store')

    @property
    def session_results(self):
        return self._container.get('session_results')

    @abstractmethod
    def execute(self, subcommand: str, args: Namespace) -> int:
        """
        Execute the command with given subcommand and arguments.

        Args:
            subcommand: The specific action to perform
            args: Parsed command line arguments

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        pass

    def get_available_subcommands(self) -> List[str]:
        """Public methods of the concrete command, minus the shared ones."""
        methods = []
        for attr_name in dir(self):
            if attr_name.startswith('_') or attr_name in ['execute', 'get_available_subcommands',
                                                          'handle_error', 'report_provider_error',
                                                          'unknown_subcommand']:
                continue
            if callable(getattr(type(self), attr_name, None)):
                methods.append(attr_name)
        return methods

    def unknown_subcommand(self, subcommand: str) -> int:
        available = ", ".join(self.get_available_subcommands())
        self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
        return 1

    def report_provider_error(self, url: str, error: ProviderError) -> None:
        """Show a provider failure as a one-line notice."""
        print(f"❌ {url}: {error.message}")

    def handle_error(self, error: Exception, context: str = "") -> int:
        """
        Standard error handling for commands.

        Args:
            error: The exception that occurred
            context: Additional context about where the error occurred

        Returns:
            Appropriate exit code
        """
        error_msg = f"{context}: {error}" if context else str(error)
        self.logger.error(error_msg, exc_info=not isinstance(error, (ValueError, ProviderError)))
        if isinstance(error, WebVitalsError):
            self.logger.debug(f"Error details: {error.to_dict()}")

        if isinstance(error, KeyboardInterrupt):
            self.logger.info("Command interrupted by user")
            return 130
        elif isinstance(error, FileNotFoundError):
            return 2
        elif isinstance(error, PermissionError):
            return 13
        elif isinstance(error, ValueError):
            return 22
        else:
            return 1
