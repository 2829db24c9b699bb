#!/usr/bin/env python3
"""
Analyze command endpoints: run PageSpeed analyses and compare results.
"""

from argparse import Namespace

from .base import BaseCommand
from core.analyzer import AnalysisRequest
from core.exceptions import ProviderError
from core.formatters import format_result_cards
from core.views import build_result_cards


class AnalyzeCommand(BaseCommand):
    """Run Core Web Vitals analyses for one or more URLs."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute analyze subcommand."""
        try:
            if subcommand == "run":
                return self.run(args)
            else:
                return self.unknown_subcommand(subcommand)

        except Exception as e:
            return self.handle_error(e, f"analyze {subcommand}")

    def run(self, args: Namespace) -> int:
        """Analyze URLs and print the session comparison."""
        strategy = getattr(args, 'strategy', None) or self.config.app.default_strategy
        api_key = getattr(args, 'api_key', None)
        requests = [AnalysisRequest.create(url, strategy) for url in getattr(args, 'urls', [])]
        requests = [request for request in requests if request.url]

        if not requests:
            self.logger.debug("No URLs to analyze")
            return 0

        failures = 0
        if getattr(args, 'async_fetch', False) and len(requests) > 1:
            print(f"⏳ Analyzing {len(requests)} URLs concurrently ({strategy})...")
            for outcome in self.analyzer.analyze_many(requests, api_key=api_key):
                if outcome.error is not None:
                    failures += 1
                    self.report_provider_error(outcome.request.url, outcome.error)
        else:
            for request in requests:
                print(f"⏳ Analyzing {request.url} ({request.strategy.value})...")
                try:
                    self.analyzer.analyze(request.url, request.strategy, api_key=api_key)
                except ProviderError as e:
                    failures += 1
                    self.report_provider_error(request.url, e)

        if len(self.session_results):
            print("\n=== Comparison ===")
            print(format_result_cards(build_result_cards(self.session_results)))

        return 1 if failures == len(requests) else 0
