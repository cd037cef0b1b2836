"""Providers — HTTP clients for upstream price sources."""

from bullion.providers.client import HttpClient
from bullion.providers.eia import CrudeQuote, EIAClient
from bullion.providers.metals import MetalsClient

__all__ = ["CrudeQuote", "EIAClient", "HttpClient", "MetalsClient"]
