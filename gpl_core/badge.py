"""
Badges, issuers and schemas on the core program.

An issuer is owned by an authority and is verified by a privileged signer.
A schema describes what a badge means; its address comes from a random salt
so that two schemas with the same metadata URI never collide. A badge ties
an issuer, a schema and a holder together, and its address is derived from
that triple, so each holder can carry at most one badge per issuer and
schema.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Mapping, Optional, Union

from solders.pubkey import Pubkey

from .constants import RANDOM_HASH_LENGTH
from .errors import MissingSignerError
from .graphql import parse_timestamp
from .layouts import Badge, Issuer, Schema
from .pda import find_badge_address, find_issuer_address
from .program import (
    FetchResult,
    InstructionBuilder,
    PreparedInstruction,
    as_pubkey,
    get_or_create,
)

logger = logging.getLogger(__name__)

Key = Union[Pubkey, str]

TIMESTAMP_FIELDS = """
          refreshed_at
          slot_created_at
          slot_updated_at
          created_at"""

BADGE_FIELDS = """
          address
          issuer
          holder
          update_authority
          schema
          metadata_uri""" + TIMESTAMP_FIELDS

ISSUER_FIELDS = """
          address
          authority
          verified""" + TIMESTAMP_FIELDS

GET_ALL_BADGES = """
      query GetAllBadges {
        badge {%s
        }
      }""" % BADGE_FIELDS

GET_BADGES_BY_ISSUER = """
      query GetBadgesByIssuer($issuer: String!) {
        badge(where: {issuer: {_eq: $issuer}}) {%s
        }
      }""" % BADGE_FIELDS

GET_BADGES_BY_HOLDER = """
      query GetBadgesByHolder($holder: String!) {
        badge(where: {holder: {_eq: $holder}}) {%s
        }
      }""" % BADGE_FIELDS

GET_ISSUERS_BY_AUTHORITY = """
      query GetIssuersByAuthority($authority: String!) {
        issuer(where: {authority: {_eq: $authority}}) {%s
        }
      }""" % ISSUER_FIELDS


def _timestamps(row: Mapping[str, Any]) -> dict:
    return {
        k: parse_timestamp(row.get(k))
        for k in ("refreshed_at", "slot_created_at", "slot_updated_at", "created_at")
    }


@dataclass(frozen=True)
class IndexedBadge:
    address: str
    issuer: str
    holder: str
    update_authority: str
    schema: str
    metadata_uri: str
    refreshed_at: Optional[datetime] = None
    slot_created_at: Optional[datetime] = None
    slot_updated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "IndexedBadge":
        return cls(
            address=row["address"],
            issuer=row["issuer"],
            holder=row["holder"],
            update_authority=row["update_authority"],
            schema=row["schema"],
            metadata_uri=row["metadata_uri"],
            **_timestamps(row),
        )


@dataclass(frozen=True)
class IndexedIssuer:
    address: str
    authority: str
    verified: bool
    refreshed_at: Optional[datetime] = None
    slot_created_at: Optional[datetime] = None
    slot_updated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "IndexedIssuer":
        return cls(
            address=row["address"],
            authority=row["authority"],
            verified=bool(row["verified"]),
            **_timestamps(row),
        )


class BadgeClient:
    def __init__(self, sdk):
        self.sdk = sdk

    @property
    def program(self):
        return self.sdk.program

    def _authority(self, authority: Optional[Key]) -> Pubkey:
        if authority is not None:
            return as_pubkey(authority)
        if self.program.wallet is None:
            raise MissingSignerError("authority is required when the SDK has no wallet")
        return self.program.wallet.pubkey()

    # ---------------- Badges ----------------

    def get_badge(self, badge: Key) -> Badge:
        return self.program.get("Badge", badge)

    def fetch_badge(self, badge: Key) -> FetchResult:
        return self.program.fetch("Badge", badge)

    def create_badge(
        self,
        metadata_uri: str,
        issuer: Key,
        schema: Key,
        holder: Key,
        update_authority: Key,
        authority: Optional[Key] = None,
    ) -> PreparedInstruction:
        builder = self.program.method("create_badge", metadata_uri=metadata_uri).accounts(
            issuer=issuer,
            schema=schema,
            holder=holder,
            update_authority=update_authority,
            authority=authority,
        )
        return PreparedInstruction(builder, builder.pubkeys()["badge"])

    def get_or_create_badge(
        self,
        metadata_uri: str,
        issuer: Key,
        schema: Key,
        holder: Key,
        update_authority: Key,
        authority: Optional[Key] = None,
    ) -> Pubkey:
        badge, _ = find_badge_address(
            as_pubkey(issuer), as_pubkey(schema), as_pubkey(holder), self.program.program_id
        )
        return get_or_create(
            self.program,
            "Badge",
            badge,
            lambda: self.create_badge(
                metadata_uri, issuer, schema, holder, update_authority, authority
            ).builder,
        )

    def update_badge(
        self,
        metadata_uri: str,
        badge: Key,
        issuer: Key,
        schema: Key,
        signer: Optional[Key] = None,
    ) -> InstructionBuilder:
        return self.program.method("update_badge", metadata_uri=metadata_uri).accounts(
            badge=badge,
            issuer=issuer,
            schema=schema,
            signer=signer,
        )

    def burn_badge(
        self,
        badge: Key,
        issuer: Key,
        schema: Key,
        holder: Key,
        signer: Optional[Key] = None,
    ) -> InstructionBuilder:
        return self.program.method("burn_badge").accounts(
            badge=badge,
            issuer=issuer,
            schema=schema,
            holder=holder,
            signer=signer,
        )

    # ---------------- Issuers ----------------

    def get_issuer(self, issuer: Key) -> Issuer:
        return self.program.get("Issuer", issuer)

    def fetch_issuer(self, issuer: Key) -> FetchResult:
        return self.program.fetch("Issuer", issuer)

    def create_issuer(self, authority: Optional[Key] = None) -> PreparedInstruction:
        builder = self.program.method("create_issuer").accounts(authority=authority)
        return PreparedInstruction(builder, builder.pubkeys()["issuer"])

    def get_or_create_issuer(self, authority: Optional[Key] = None) -> Pubkey:
        issuer, _ = find_issuer_address(self._authority(authority), self.program.program_id)
        return get_or_create(
            self.program, "Issuer", issuer, lambda: self.create_issuer(authority).builder
        )

    def verify_issuer(self, issuer: Key, signer: Optional[Key] = None) -> InstructionBuilder:
        return self.program.method("verify_issuer").accounts(issuer=issuer, signer=signer)

    def delete_issuer(self, issuer: Key, authority: Optional[Key] = None) -> InstructionBuilder:
        return self.program.method("delete_issuer").accounts(issuer=issuer, authority=authority)

    # ---------------- Schemas ----------------

    def get_schema(self, schema: Key) -> Schema:
        return self.program.get("Schema", schema)

    def fetch_schema(self, schema: Key) -> FetchResult:
        return self.program.fetch("Schema", schema)

    def create_schema(
        self,
        metadata_uri: str,
        authority: Optional[Key] = None,
        random_hash: Optional[bytes] = None,
    ) -> PreparedInstruction:
        if random_hash is None:
            random_hash = secrets.token_bytes(RANDOM_HASH_LENGTH)
        builder = self.program.method(
            "create_schema", metadata_uri=metadata_uri, random_hash=bytes(random_hash)
        ).accounts(authority=authority)
        schema = builder.pubkeys()["schema"]
        logger.debug("schema %s for %s", schema, metadata_uri)
        return PreparedInstruction(builder, schema)

    def update_schema(
        self, metadata_uri: str, schema: Key, authority: Optional[Key] = None
    ) -> InstructionBuilder:
        return self.program.method("update_schema", metadata_uri=metadata_uri).accounts(
            schema=schema, authority=authority
        )

    def delete_schema(self, schema: Key, authority: Optional[Key] = None) -> InstructionBuilder:
        return self.program.method("delete_schema").accounts(schema=schema, authority=authority)

    # ---------------- GraphQL queries ----------------

    def get_all_badges(self) -> List[IndexedBadge]:
        data = self.sdk.query(GET_ALL_BADGES)
        return [IndexedBadge.from_row(row) for row in data.get("badge") or []]

    def get_badges_by_issuer(self, issuer: Key) -> List[IndexedBadge]:
        data = self.sdk.query(GET_BADGES_BY_ISSUER, {"issuer": str(issuer)})
        return [IndexedBadge.from_row(row) for row in data.get("badge") or []]

    def get_badges_by_holder(self, holder: Key) -> List[IndexedBadge]:
        data = self.sdk.query(GET_BADGES_BY_HOLDER, {"holder": str(holder)})
        return [IndexedBadge.from_row(row) for row in data.get("badge") or []]

    def get_issuers_by_authority(self, authority: Key) -> List[IndexedIssuer]:
        data = self.sdk.query(GET_ISSUERS_BY_AUTHORITY, {"authority": str(authority)})
        return [IndexedIssuer.from_row(row) for row in data.get("issuer") or []]


__all__ = ["IndexedBadge", "IndexedIssuer", "BadgeClient"]
