"""
Typed errors raised by the gpl client.

Everything derives from `GplError`, so callers can catch the whole family at
once or pick out the failure they care about (an absent account versus a
transport failure while looking for it, for instance).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

__all__ = [
    "GplError",
    "ConfigError",
    "AccountNotFoundError",
    "AccountDecodeError",
    "FetchError",
    "MissingAccountError",
    "MissingSignerError",
    "TransactionError",
    "GraphQLError",
]


class GplError(Exception):
    """Base class for all client errors."""


class ConfigError(GplError, ValueError):
    """Raised when a configuration value cannot be parsed."""


@dataclass
class AccountNotFoundError(GplError):
    """The RPC node answered, and there is no account at `address`."""

    account: str
    address: str

    def __str__(self) -> str:
        return f"{self.account} account not found: {self.address}"


@dataclass
class AccountDecodeError(GplError):
    """Account data does not match the expected layout."""

    account: str
    address: str
    reason: str

    def __str__(self) -> str:
        return f"cannot decode {self.account} at {self.address}: {self.reason}"


@dataclass
class FetchError(GplError):
    """
    The account could not be fetched because the RPC call itself failed.

    This is never treated as absence; the underlying exception is kept in
    `__cause__`.
    """

    account: str
    address: str
    message: str

    def __str__(self) -> str:
        return f"fetching {self.account} at {self.address} failed: {self.message}"


@dataclass
class MissingAccountError(GplError):
    """An instruction role has no address bound and none can be derived."""

    instruction: str
    role: str

    def __str__(self) -> str:
        return f"{self.instruction}: account '{self.role}' is not set"


class MissingSignerError(GplError):
    """A transaction was requested but the SDK has no wallet to pay for it."""


@dataclass
class TransactionError(GplError):
    """The cluster rejected a submitted transaction."""

    instruction: str
    message: str
    signature: Optional[str] = None

    def __str__(self) -> str:
        sig = f" sig={self.signature}" if self.signature else ""
        return f"{self.instruction} failed{sig}: {self.message}"


@dataclass
class GraphQLError(GplError):
    """The indexer answered with a GraphQL `errors` array."""

    errors: List[Any]

    def __str__(self) -> str:
        messages = [
            e.get("message", repr(e)) if isinstance(e, dict) else str(e)
            for e in self.errors
        ]
        return "GraphQL error: " + "; ".join(messages)
