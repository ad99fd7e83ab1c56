"""Python client for the gpl nameservice and badge programs on Solana."""

from .badge import BadgeClient, IndexedBadge, IndexedIssuer
from .config import SDKConfig, load_keypair
from .errors import (
    AccountDecodeError,
    AccountNotFoundError,
    ConfigError,
    FetchError,
    GplError,
    GraphQLError,
    MissingAccountError,
    MissingSignerError,
    TransactionError,
)
from .graphql import GraphQLClient
from .layouts import Badge, Issuer, NameRecord, Schema
from .nameservice import IndexedNameRecord, NameServiceClient
from .pda import (
    find_badge_address,
    find_issuer_address,
    find_name_record_address,
    find_schema_address,
    find_tld_address,
    hash_name,
)
from .program import (
    Absent,
    FetchResult,
    Found,
    InstructionBuilder,
    PreparedInstruction,
    Program,
    TransportError,
)
from .sdk import SDK

__version__ = "0.1.0"

__all__ = [
    "SDK",
    "SDKConfig",
    "load_keypair",
    # Clients
    "BadgeClient",
    "NameServiceClient",
    "GraphQLClient",
    "Program",
    "InstructionBuilder",
    "PreparedInstruction",
    # Fetch results
    "Found",
    "Absent",
    "TransportError",
    "FetchResult",
    # Accounts
    "NameRecord",
    "Badge",
    "Issuer",
    "Schema",
    "IndexedNameRecord",
    "IndexedBadge",
    "IndexedIssuer",
    # Address derivation
    "hash_name",
    "find_name_record_address",
    "find_tld_address",
    "find_badge_address",
    "find_issuer_address",
    "find_schema_address",
    # Errors
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
