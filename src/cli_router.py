#!/usr/bin/env python3
"""
CLI Router for the Core Web Vitals tracker.

Parses the command line and dispatches to command classes.
"""

import argparse
import logging
import sys
from typing import Optional, List

# Load environment variables first
import core.env_loader  # noqa: F401  Auto-loads .env file

from commands import get_command, COMMANDS

logger = logging.getLogger(__name__)

STRATEGY_CHOICES = ['mobile', 'desktop']


class CLIRouter:
    """
    CLI router for Web Vitals commands.

    Command structure:
    - python run.py analyze run example.com --strategy desktop
    - python run.py history list
    - python run.py history export --output-dir exports
    - python run.py config show
    """

    def __init__(self, container=None):
        """
        Initialize CLI router.

        Args:
            container: Optional dependency container handed to commands
        """
        self.container = container
        self._command_parsers = {}
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            description="Core Web Vitals analysis via PageSpeed Insights",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self._get_examples_text()
        )
        parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')

        subparsers = parser.add_subparsers(
            dest='command',
            help='Available commands',
            metavar='{command}'
        )

        self._add_analyze_parser(subparsers)
        self._add_history_parser(subparsers)
        self._add_config_parser(subparsers)

        return parser

    def _add_analyze_parser(self, subparsers):
        """Add analyze command parser."""
        analyze_parser = subparsers.add_parser(
            'analyze',
            help='Run PageSpeed analyses and compare results'
        )
        self._command_parsers['analyze'] = analyze_parser

        analyze_subparsers = analyze_parser.add_subparsers(
            dest='subcommand',
            help='Analyze operations',
            metavar='{run}'
        )

        run_parser = analyze_subparsers.add_parser('run', help='Analyze one or more URLs')
        run_parser.add_argument('urls', nargs='+', help='URLs to analyze')
        run_parser.add_argument('--strategy', choices=STRATEGY_CHOICES, default=None, help='Device strategy (default: from config, mobile)')
        run_parser.add_argument('--api-key', dest='api_key', default=None, help='PageSpeed API key (default: PAGESPEED_API_KEY)')
        run_parser.add_argument('--async', dest='async_fetch', action='store_true', help='Analyze URLs concurrently')

    def _add_history_parser(self, subparsers):
        """Add history command parser."""
        history_parser = subparsers.add_parser(
            'history',
            help='Stored analysis history'
        )
        self._command_parsers['history'] = history_parser

        history_subparsers = history_parser.add_subparsers(
            dest='subcommand',
            help='History operations',
            metavar='{list,clear,export,rerun}'
        )

        history_subparsers.add_parser('list', help='Show stored analyses, most recent first')

        clear_parser = history_subparsers.add_parser('clear', help='Delete all stored analyses')
        clear_parser.add_argument('--force', action='store_true', help='Skip confirmation prompt')

        export_parser = history_subparsers.add_parser('export', help='Export history to CSV')
        export_parser.add_argument('--output-dir', dest='output_dir', default=None, help='Directory for the CSV file (default: EXPORT_DIR or current directory)')

        rerun_parser = history_subparsers.add_parser('rerun', help='Analyze a history entry again')
        rerun_parser.add_argument('index', type=int, help='Position in history list (0 is most recent)')
        rerun_parser.add_argument('--api-key', dest='api_key', default=None, help='PageSpeed API key (default: PAGESPEED_API_KEY)')

    def _add_config_parser(self, subparsers):
        """Add config command parser."""
        config_parser = subparsers.add_parser(
            'config',
            help='Configuration inspection'
        )
        self._command_parsers['config'] = config_parser

        config_subparsers = config_parser.add_subparsers(
            dest='subcommand',
            help='Config operations',
            metavar='{show}'
        )

        config_subparsers.add_parser('show', help='Show effective configuration')

    def _get_examples_text(self) -> str:
        """Get examples text for help."""
        return """
Examples:
  python run.py analyze run example.com
  python run.py analyze run example.com example.org --strategy desktop --async
  python run.py history list
  python run.py history rerun 0
  python run.py history export --output-dir exports
  python run.py history clear --force
  python run.py config show
"""

    def route_command(self, args: Optional[List[str]] = None) -> int:
        """
        Route command to appropriate handler.

        Args:
            args: Command line arguments (uses sys.argv if None)

        Returns:
            Exit code
        """
        try:
            if args is None:
                args = sys.argv[1:]

            parsed_args = self.parser.parse_args(args)

            if getattr(parsed_args, 'verbose', False):
                logging.getLogger().setLevel(logging.DEBUG)

            if not parsed_args.command:
                self.parser.print_help()
                return 1

            return self._handle_command(parsed_args)

        except SystemExit as e:
            # argparse calls sys.exit() on error or help
            return e.code if e.code is not None else 0
        except Exception as e:
            logger.error(f"CLI routing error: {e}", exc_info=True)
            return 1

    def _handle_command(self, args: argparse.Namespace) -> int:
        """Handle command structure."""
        logger.debug(f"Handling command: {args.command}")

        if args.command not in COMMANDS:
            available = ', '.join(COMMANDS.keys())
            logger.error(f"Unknown command '{args.command}'. Available: {available}")
            return 1

        subcommand = getattr(args, 'subcommand', None)
        if not subcommand:
            logger.error(f"No subcommand specified for '{args.command}'")
            self._command_parsers[args.command].print_help()
            return 1

        try:
            command = get_command(args.command, self.container)
            return command.execute(subcommand, args)
        except Exception as e:
            logger.error(f"Error executing {args.command} {subcommand}: {e}", exc_info=True)
            return 1


def main(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        from core.config import get_config_manager
        get_config_manager().update_logging()
    except ValueError as e:
        logger.error(str(e))
        return 22

    router = CLIRouter()
    return router.route_command(args)


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
