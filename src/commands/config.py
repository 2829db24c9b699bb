#!/usr/bin/env python3
"""
Config command endpoints.
"""

from argparse import Namespace

from .base import BaseCommand


class ConfigCommand(BaseCommand):
    """Inspect effective configuration."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        try:
            if subcommand == "show":
                return self.show(args)
            else:
                return self.unknown_subcommand(subcommand)

        except Exception as e:
            return self.handle_error(e, f"config {subcommand}")

    def show(self, args: Namespace) -> int:
        """Print configuration without secrets."""
        print("\n=== Configuration ===")
        for key, value in self.config.to_public_dict().items():
            print(f"  • {key}: {value}")
        return 0
