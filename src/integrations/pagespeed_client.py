#!/usr/bin/env python3
"""
PageSpeed Insights integration.

Provides synchronous (requests) and asynchronous (aiohttp) clients for the
runPagespeed endpoint. Both return the decoded JSON body and raise the
ProviderError family on failure.
"""

import asyncio
import logging
import os
from typing import Any, Dict, Optional, Union

import aiohttp
import requests

from core.exceptions import (
    ProviderConnectionError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderTimeoutError,
)
from core.models.analysis import Strategy

logger = logging.getLogger(__name__)

PAGESPEED_API_URL = 'https://www.googleapis.com/pagespeedonline/v5/runPagespeed'
USER_AGENT = 'Mozilla/5.0 (compatible; WebVitalsTracker/1.0)'


def build_params(url: str, strategy: Union[str, Strategy], api_key: Optional[str] = None) -> Dict[str, str]:
    """Query parameters for one analysis; the key is only sent when provided."""
    params = {
        'url': url,
        'strategy': Strategy.parse(strategy).value,
        'category': 'performance',
    }
    if api_key and api_key.strip():
        params['key'] = api_key.strip()
    return params


def extract_error_message(body: Any) -> Optional[str]:
    """Provider error message from an error body, if there is one."""
    if not isinstance(body, dict):
        return None
    error = body.get('error')
    if not isinstance(error, dict):
        return None
    message = error.get('message')
    if isinstance(message, str) and message.strip():
        return message
    return None


class PageSpeedClient:
    """Blocking client for the PageSpeed Insights API."""

    def __init__(self, api_url: Optional[str] = None, api_key: Optional[str] = None,
                 timeout: float = 60, session: Optional[requests.Session] = None):
        """
        Initialize PageSpeed client.

        Args:
            api_url: Endpoint override, defaults to the public v5 endpoint
            api_key: Default API key. If None, tries PAGESPEED_API_KEY.
            timeout: Request timeout in seconds
            session: Optional preconfigured requests session
        """
        self.api_url = api_url or PAGESPEED_API_URL
        self.api_key = api_key or os.getenv('PAGESPEED_API_KEY')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': USER_AGENT})

    def run_pagespeed(self, url: str, strategy: Union[str, Strategy],
                      api_key: Optional[str] = None) -> Dict[str, Any]:
        """
        Run one performance analysis.

        Args:
            url: Page to analyze
            strategy: 'mobile' or 'desktop'
            api_key: Per-call key, overrides the client default

        Returns:
            Decoded JSON response

        Raises:
            ProviderError: On transport failure, non-success status or non-JSON body
        """
        params = build_params(url, strategy, api_key or self.api_key)
        logger.info(f"Requesting PageSpeed analysis for {url} ({params['strategy']})")

        try:
            response = self.session.get(self.api_url, params=params, timeout=self.timeout)
        except requests.Timeout:
            logger.error(f"PageSpeed request timed out for {url}")
            raise ProviderTimeoutError(url, self.timeout)
        except requests.RequestException as e:
            logger.error(f"PageSpeed request failed for {url}: {e}")
            raise ProviderConnectionError(url, e)

        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = None
            error = ProviderHTTPError(response.status_code, extract_error_message(body), url)
            logger.error(f"PageSpeed returned {response.status_code} for {url}: {error.message}")
            raise error

        try:
            return response.json()
        except ValueError as e:
            raise ProviderResponseError(url, e)

    def close(self) -> None:
        self.session.close()


class AsyncPageSpeedClient:
    """Async PageSpeed client; several analyses may be in flight at once."""

    def __init__(self, api_url: Optional[str] = None, api_key: Optional[str] = None,
                 timeout: float = 60, max_concurrent: int = 5,
                 session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize async PageSpeed client.

        Args:
            api_url: Endpoint override, defaults to the public v5 endpoint
            api_key: Default API key. If None, tries PAGESPEED_API_KEY.
            timeout: Total request timeout in seconds
            max_concurrent: Maximum requests in flight
            session: Optional externally managed aiohttp session
        """
        self.api_url = api_url or PAGESPEED_API_URL
        self.api_key = api_key or os.getenv('PAGESPEED_API_KEY')
        self.timeout = timeout
        self.max_concurrent = max_concurrent
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        """Async context manager entry."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={'User-Agent': USER_AGENT}
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._session and self._owns_session:
            await self._session.close()
            self._session = None

    async def run_pagespeed(self, url: str, strategy: Union[str, Strategy],
                            api_key: Optional[str] = None) -> Dict[str, Any]:
        """Async counterpart of PageSpeedClient.run_pagespeed."""
        if not self._session:
            raise RuntimeError("AsyncPageSpeedClient must be used as async context manager")

        params = build_params(url, strategy, api_key or self.api_key)

        async with self._semaphore:
            logger.info(f"Requesting PageSpeed analysis for {url} ({params['strategy']})")
            try:
                async with self._session.get(self.api_url, params=params) as response:
                    if response.status >= 400:
                        try:
                            body = await response.json(content_type=None)
                        except ValueError:
                            body = None
                        error = ProviderHTTPError(response.status, extract_error_message(body), url)
                        logger.error(f"PageSpeed returned {response.status} for {url}: {error.message}")
                        raise error

                    try:
                        return await response.json(content_type=None)
                    except ValueError as e:
                        raise ProviderResponseError(url, e)

            except asyncio.TimeoutError:
                logger.error(f"PageSpeed request timed out for {url}")
                raise ProviderTimeoutError(url, self.timeout)
            except aiohttp.ClientError as e:
                logger.error(f"PageSpeed request failed for {url}: {e}")
                raise ProviderConnectionError(url, e)
