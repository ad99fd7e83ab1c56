import logging
from typing import Optional, Tuple

from Crypto.Hash import keccak
from solders.pubkey import Pubkey

from .constants import (
    BADGE_PREFIX,
    CORE_PROGRAM_ID,
    ISSUER_PREFIX,
    NAME_RECORD_PREFIX,
    NAMESERVICE_PROGRAM_ID,
    RANDOM_HASH_LENGTH,
    SCHEMA_PREFIX,
    ZERO_SCOPE,
)

logger = logging.getLogger(__name__)


def hash_name(name: str) -> bytes:
    """Keccak-256 of the UTF-8 encoded name (Ethereum padding, not NIST SHA3)."""
    if not isinstance(name, str):
        raise TypeError(f"name must be str, got {type(name).__name__}")
    h = keccak.new(digest_bits=256)
    h.update(name.encode("utf-8"))
    return h.digest()


def find_name_record_address(
    name: str,
    parent: Optional[Pubkey] = None,
    program_id: Pubkey = NAMESERVICE_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    if parent is None:
        parent = ZERO_SCOPE
    seeds = [NAME_RECORD_PREFIX, hash_name(name), bytes(parent)]
    key, bump = Pubkey.find_program_address(seeds, program_id)
    logger.debug("name record %r under %s -> %s", name, parent, key)
    return key, bump


def find_tld_address(
    tld: str, program_id: Pubkey = NAMESERVICE_PROGRAM_ID
) -> Tuple[Pubkey, int]:
    return find_name_record_address(tld, None, program_id)


def find_badge_address(
    issuer: Pubkey,
    schema: Pubkey,
    holder: Pubkey,
    program_id: Pubkey = CORE_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    # One badge per (issuer, schema, holder)
    seeds = [BADGE_PREFIX, bytes(issuer), bytes(schema), bytes(holder)]
    return Pubkey.find_program_address(seeds, program_id)


def find_issuer_address(
    authority: Pubkey, program_id: Pubkey = CORE_PROGRAM_ID
) -> Tuple[Pubkey, int]:
    return Pubkey.find_program_address([ISSUER_PREFIX, bytes(authority)], program_id)


def find_schema_address(
    random_hash: bytes, program_id: Pubkey = CORE_PROGRAM_ID
) -> Tuple[Pubkey, int]:
    random_hash = bytes(random_hash)
    if len(random_hash) != RANDOM_HASH_LENGTH:
        raise ValueError(
            f"random_hash must be {RANDOM_HASH_LENGTH} bytes, got {len(random_hash)}"
        )
    return Pubkey.find_program_address([SCHEMA_PREFIX, random_hash], program_id)


__all__ = [
    "hash_name",
    "find_name_record_address",
    "find_tld_address",
    "find_badge_address",
    "find_issuer_address",
    "find_schema_address",
]
