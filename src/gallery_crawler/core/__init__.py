"""Core crawler components."""

from .fetcher import DEFAULT_USER_AGENT, HttpFetcher
from .protocols import Fetcher, Response

__all__ = ["Fetcher", "Response", "HttpFetcher", "DEFAULT_USER_AGENT"]
