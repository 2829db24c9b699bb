#!/usr/bin/env python3
"""
History command endpoints for listing, clearing, exporting and replaying
past analyses.
"""

from argparse import Namespace

from .base import BaseCommand
from core.exceptions import ProviderError
from core.export import write_export
from core.formatters import format_history, format_result_cards
from core.views import build_history_entries, build_result_cards


class HistoryCommand(BaseCommand):
    """Handle analysis history operations."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute history subcommand."""
        try:
            if subcommand == "list":
                return self.list(args)
            elif subcommand == "clear":
                return self.clear(args)
            elif subcommand == "export":
                return self.export(args)
            elif subcommand == "rerun":
                return self.rerun(args)
            else:
                return self.unknown_subcommand(subcommand)

        except Exception as e:
            return self.handle_error(e, f"history {subcommand}")

    def list(self, args: Namespace) -> int:
        """Show stored analyses, most recent first."""
        history = self.history_store.load()
        entries = build_history_entries(history, self.config.app.display_timezone)

        print(f"\n=== History ({len(entries)}/{self.history_store.max_entries}) ===")
        print(format_history(entries))
        return 0

    def clear(self, args: Namespace) -> int:
        """Delete the whole history."""
        if not getattr(args, 'force', False):
            print("⚠️  This will delete all stored analyses")
            confirm = input("Are you sure? (yes/no): ").lower().strip()
            if confirm != 'yes':
                print("❌ Clear cancelled")
                return 0

        count = len(self.history_store)
        self.history_store.clear()
        print(f"✅ History cleared ({count} entries removed)")
        return 0

    def export(self, args: Namespace) -> int:
        """Export history to a timestamped CSV file."""
        directory = getattr(args, 'output_dir', None) or self.config.storage.export_dir
        path = write_export(self.history_store.load(), directory)

        if path is None:
            print("ℹ️  History is empty, nothing exported")
            return 0

        print(f"📤 Exported history to {path}")
        return 0

    def rerun(self, args: Namespace) -> int:
        """Analyze a history entry's URL and strategy again."""
        index = getattr(args, 'index', 0)
        previous = self.history_store.get(index)
        if previous is None:
            self.logger.error(f"No history entry at position {index}")
            return 1

        print(f"⏳ Re-analyzing {previous.url} ({previous.strategy.value})...")
        try:
            self.analyzer.reanalyze(index, api_key=getattr(args, 'api_key', None))
        except ProviderError as e:
            self.report_provider_error(previous.url, e)
            return 1

        print(format_result_cards(build_result_cards(self.session_results)))
        return 0
