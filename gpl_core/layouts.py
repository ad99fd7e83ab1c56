"""
Binary layouts for the gpl programs (Anchor framing, Borsh bodies).

Account data is an 8 byte discriminator, ``sha256("account:<Name>")[:8]``,
followed by the Borsh-encoded fields. Instruction data is an 8 byte
discriminator, ``sha256("global:<snake_name>")[:8]``, followed by the Borsh
arguments.
"""

import hashlib
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

from construct import (
    Adapter,
    Bytes,
    ConstructError,
    Flag,
    Int32ul,
    PascalString,
    Struct,
)
from solders.pubkey import Pubkey

from .errors import AccountDecodeError

DISCRIMINATOR_SIZE = 8


class PubkeyAdapter(Adapter):
    def _decode(self, obj, context, path):
        return Pubkey.from_bytes(obj)

    def _encode(self, obj, context, path):
        return bytes(obj)


PublicKey = PubkeyAdapter(Bytes(32))
BorshString = PascalString(Int32ul, "utf8")


def account_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"account:{name}".encode("utf-8")).digest()[:DISCRIMINATOR_SIZE]


def instruction_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"global:{name}".encode("utf-8")).digest()[:DISCRIMINATOR_SIZE]


# ---------------- Accounts ----------------

NAME_RECORD_LAYOUT = Struct(
    "name" / BorshString,
    "domain" / PublicKey,
    "authority" / PublicKey,
)

ISSUER_LAYOUT = Struct(
    "authority" / PublicKey,
    "verified" / Flag,
)

SCHEMA_LAYOUT = Struct(
    "authority" / PublicKey,
    "metadata_uri" / BorshString,
    "random_hash" / Bytes(32),
)

BADGE_LAYOUT = Struct(
    "issuer" / PublicKey,
    "holder" / PublicKey,
    "update_authority" / PublicKey,
    "schema" / PublicKey,
    "metadata_uri" / BorshString,
)


@dataclass(frozen=True)
class NameRecord:
    address: Pubkey
    name: str
    domain: Pubkey
    authority: Pubkey


@dataclass(frozen=True)
class Issuer:
    address: Pubkey
    authority: Pubkey
    verified: bool


@dataclass(frozen=True)
class Schema:
    address: Pubkey
    authority: Pubkey
    metadata_uri: str
    random_hash: bytes


@dataclass(frozen=True)
class Badge:
    address: Pubkey
    issuer: Pubkey
    holder: Pubkey
    update_authority: Pubkey
    schema: Pubkey
    metadata_uri: str


@dataclass(frozen=True)
class AccountLayout:
    """Binds an account name to its Borsh layout and the dataclass it decodes into."""

    name: str
    layout: Struct
    factory: Type[Any]

    @property
    def discriminator(self) -> bytes:
        return account_discriminator(self.name)

    def decode(self, address: Pubkey, data: bytes) -> Any:
        data = bytes(data)
        if len(data) < DISCRIMINATOR_SIZE:
            raise AccountDecodeError(self.name, str(address), "data shorter than discriminator")
        if data[:DISCRIMINATOR_SIZE] != self.discriminator:
            raise AccountDecodeError(self.name, str(address), "discriminator mismatch")
        try:
            parsed = self.layout.parse(data[DISCRIMINATOR_SIZE:])
        except (ConstructError, UnicodeDecodeError) as e:
            raise AccountDecodeError(self.name, str(address), str(e)) from e
        fields = {k: v for k, v in parsed.items() if not k.startswith("_")}
        return self.factory(address=address, **fields)

    def encode(self, **fields: Any) -> bytes:
        return self.discriminator + self.layout.build(fields)


NAME_RECORD = AccountLayout("NameRecord", NAME_RECORD_LAYOUT, NameRecord)
ISSUER = AccountLayout("Issuer", ISSUER_LAYOUT, Issuer)
SCHEMA = AccountLayout("Schema", SCHEMA_LAYOUT, Schema)
BADGE = AccountLayout("Badge", BADGE_LAYOUT, Badge)


# ---------------- Instruction arguments ----------------

NO_ARGS = Struct()
TLD_ARGS = Struct("tld" / BorshString)
NAME_ARGS = Struct("name" / BorshString)
METADATA_URI_ARGS = Struct("metadata_uri" / BorshString)
CREATE_SCHEMA_ARGS = Struct(
    "metadata_uri" / BorshString,
    "random_hash" / Bytes(32),
)


def encode_instruction(name: str, args_layout: Struct, args: Optional[Dict[str, Any]] = None) -> bytes:
    return instruction_discriminator(name) + args_layout.build(args or {})


__all__ = [
    "DISCRIMINATOR_SIZE",
    "PublicKey",
    "BorshString",
    "account_discriminator",
    "instruction_discriminator",
    "AccountLayout",
    "NameRecord",
    "Issuer",
    "Schema",
    "Badge",
    "NAME_RECORD",
    "ISSUER",
    "SCHEMA",
    "BADGE",
    "NO_ARGS",
    "TLD_ARGS",
    "NAME_ARGS",
    "METADATA_URI_ARGS",
    "CREATE_SCHEMA_ARGS",
    "encode_instruction",
]
