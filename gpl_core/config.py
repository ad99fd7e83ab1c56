"""
SDK configuration: cluster RPC, indexer endpoint, program ids and wallet.

Values come from the environment (a `.env` file is loaded first when present):

    GPL_RPC_URL                 Solana JSON-RPC endpoint (http/https)
    GPL_GRAPHQL_URL             indexer GraphQL endpoint (http/https)
    GPL_CORE_PROGRAM_ID         badge/issuer/schema program
    GPL_NAMESERVICE_PROGRAM_ID  nameservice program
    GPL_KEYPAIR_PATH            Solana CLI keypair file (JSON array of 64 ints)
    GPL_COMMITMENT              processed | confirmed | finalized
    GPL_TIMEOUT                 HTTP timeout in seconds
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .constants import CORE_PROGRAM_ID, NAMESERVICE_PROGRAM_ID
from .errors import ConfigError

DEFAULT_RPC_URL = "https://api.devnet.solana.com"
DEFAULT_GRAPHQL_URL = "http://localhost:8080/v1/graphql"
DEFAULT_KEYPAIR_PATH = os.path.join("~", ".config", "solana", "id.json")

COMMITMENTS = ("processed", "confirmed", "finalized")


def _ensure_http(url: str, name: str) -> str:
    if not url.lower().startswith(("http://", "https://")):
        raise ConfigError(f"{name} must be an http(s) URL, got {url!r}")
    return url


def _parse_pubkey(value: Optional[str], default: Pubkey, name: str) -> Pubkey:
    if not value:
        return default
    try:
        return Pubkey.from_string(value.strip())
    except ValueError as e:
        raise ConfigError(f"{name} is not a valid public key: {value!r}") from e


def load_keypair(path: str) -> Optional[Keypair]:
    """Read a Solana CLI keypair file; returns None when the file does not exist."""
    path = os.path.expanduser(path)
    if not os.path.exists(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as fh:
            secret = json.load(fh)
        return Keypair.from_bytes(bytes(secret))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid keypair file {path}: {e}") from e


@dataclass
class SDKConfig:
    rpc_url: str = DEFAULT_RPC_URL
    graphql_url: str = DEFAULT_GRAPHQL_URL
    core_program_id: Pubkey = field(default_factory=lambda: CORE_PROGRAM_ID)
    nameservice_program_id: Pubkey = field(default_factory=lambda: NAMESERVICE_PROGRAM_ID)
    keypair_path: str = DEFAULT_KEYPAIR_PATH
    commitment: str = "confirmed"
    timeout: float = 10.0

    @classmethod
    def from_env(cls, prefix: str = "GPL_") -> "SDKConfig":
        load_dotenv()

        def env(name: str, default: Optional[str] = None) -> Optional[str]:
            return os.getenv(f"{prefix}{name}", default)

        commitment = (env("COMMITMENT") or "confirmed").lower()
        if commitment not in COMMITMENTS:
            raise ConfigError(f"{prefix}COMMITMENT must be one of {COMMITMENTS}, got {commitment!r}")
        try:
            timeout = float(env("TIMEOUT", "10.0"))
        except ValueError as e:
            raise ConfigError(f"{prefix}TIMEOUT must be a number") from e

        return cls(
            rpc_url=_ensure_http(env("RPC_URL") or DEFAULT_RPC_URL, f"{prefix}RPC_URL"),
            graphql_url=_ensure_http(env("GRAPHQL_URL") or DEFAULT_GRAPHQL_URL, f"{prefix}GRAPHQL_URL"),
            core_program_id=_parse_pubkey(env("CORE_PROGRAM_ID"), CORE_PROGRAM_ID, f"{prefix}CORE_PROGRAM_ID"),
            nameservice_program_id=_parse_pubkey(
                env("NAMESERVICE_PROGRAM_ID"), NAMESERVICE_PROGRAM_ID, f"{prefix}NAMESERVICE_PROGRAM_ID"
            ),
            keypair_path=env("KEYPAIR_PATH") or DEFAULT_KEYPAIR_PATH,
            commitment=commitment,
            timeout=timeout,
        )


__all__ = ["SDKConfig", "load_keypair", "DEFAULT_RPC_URL", "DEFAULT_GRAPHQL_URL"]
