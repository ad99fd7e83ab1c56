"""
Minimal GraphQL client for the indexer that mirrors on-chain state.

Queries are plain strings with `$variables`; the client POSTs
``{"query": ..., "variables": ...}`` and returns the `data` object. HTTP and
network failures surface as `requests` exceptions. A response carrying an
`errors` array raises `GraphQLError`.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

import requests

from .errors import GraphQLError

logger = logging.getLogger(__name__)

_FRACTION = re.compile(r"\.(\d+)")


class GraphQLClient:
    def __init__(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})
        if headers:
            self.session.headers.update(dict(headers))

    def request(self, query: str, variables: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        payload = {"query": query, "variables": dict(variables or {})}
        res = self.session.post(self.url, json=payload, timeout=self.timeout)
        res.raise_for_status()
        body = res.json()
        if body.get("errors"):
            raise GraphQLError(body["errors"])
        return body.get("data") or {}

    def close(self) -> None:
        self.session.close()


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Indexer timestamps are ISO-8601. Postgres trims trailing zeros from the
    fraction and may use a 'Z' suffix; Python < 3.11 accepts neither, so the
    fraction is normalised to microseconds first.
    """
    if value is None or isinstance(value, datetime):
        return value
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    value = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    return datetime.fromisoformat(value)


__all__ = ["GraphQLClient", "parse_timestamp"]
