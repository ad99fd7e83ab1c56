from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Mapping, Optional, Union

from solders.pubkey import Pubkey

from .graphql import parse_timestamp
from .layouts import NameRecord
from .pda import find_name_record_address, find_tld_address
from .program import (
    FetchResult,
    InstructionBuilder,
    PreparedInstruction,
    as_pubkey,
    get_or_create,
)

NAME_RECORD_FIELDS = """
          address
          name
          authority
          domain
          refreshed_at
          slot_created_at
          slot_updated_at
          created_at"""

GET_ALL_NAME_RECORDS = """
      query GetAllNameRecords {
        name_record {%s
        }
      }""" % NAME_RECORD_FIELDS

GET_NAME_RECORDS_BY_DOMAIN = """
      query GetNameRecordsByDomain($domain: String!) {
        name_record(where: {domain: {_eq: $domain}}) {%s
        }
      }""" % NAME_RECORD_FIELDS

GET_NAME_RECORDS_BY_AUTHORITY = """
      query GetNameRecordsByAuthority($authority: String!) {
        name_record(where: {authority: {_eq: $authority}}) {%s
        }
      }""" % NAME_RECORD_FIELDS


@dataclass(frozen=True)
class IndexedNameRecord:
    address: str
    name: str
    authority: str
    domain: str
    refreshed_at: Optional[datetime] = None
    slot_created_at: Optional[datetime] = None
    slot_updated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "IndexedNameRecord":
        return cls(
            address=row["address"],
            name=row["name"],
            authority=row["authority"],
            domain=row["domain"],
            refreshed_at=parse_timestamp(row.get("refreshed_at")),
            slot_created_at=parse_timestamp(row.get("slot_created_at")),
            slot_updated_at=parse_timestamp(row.get("slot_updated_at")),
            created_at=parse_timestamp(row.get("created_at")),
        )


class NameServiceClient:
    """Name records: top-level domains live under the zero scope, names under a domain."""

    def __init__(self, sdk):
        self.sdk = sdk

    @property
    def program(self):
        return self.sdk.nameservice_program

    def get(self, address: Union[Pubkey, str]) -> NameRecord:
        return self.program.get("NameRecord", address)

    def fetch(self, address: Union[Pubkey, str]) -> FetchResult:
        return self.program.fetch("NameRecord", address)

    def create_tld(self, tld: str) -> PreparedInstruction:
        builder = self.program.method("create_tld", tld=tld)
        return PreparedInstruction(builder, builder.pubkeys()["name_record"])

    def get_or_create_tld(self, tld: str) -> Pubkey:
        tld_account, _ = find_tld_address(tld, self.program.program_id)
        return get_or_create(
            self.program, "NameRecord", tld_account, lambda: self.create_tld(tld).builder
        )

    def create_name_record(
        self,
        parent: Union[Pubkey, str],
        name: str,
        authority: Optional[Union[Pubkey, str]] = None,
    ) -> PreparedInstruction:
        builder = self.program.method("create_name_record", name=name).accounts(
            domain=parent,
            authority=authority,
        )
        return PreparedInstruction(builder, builder.pubkeys()["name_record"])

    def get_or_create_name_record(
        self,
        parent: Union[Pubkey, str],
        name: str,
        authority: Optional[Union[Pubkey, str]] = None,
    ) -> Pubkey:
        record, _ = find_name_record_address(name, as_pubkey(parent), self.program.program_id)
        return get_or_create(
            self.program,
            "NameRecord",
            record,
            lambda: self.create_name_record(parent, name, authority).builder,
        )

    def transfer_name_record(
        self,
        name_record: Union[Pubkey, str],
        current_authority: Union[Pubkey, str],
        new_authority: Union[Pubkey, str],
    ) -> InstructionBuilder:
        return self.program.method("transfer_name_record").accounts(
            name_record=name_record,
            authority=current_authority,
            new_authority=new_authority,
        )

    # GraphQL queries

    def _query(self, query: str, variables=None) -> List[IndexedNameRecord]:
        data = self.sdk.query(query, variables)
        return [IndexedNameRecord.from_row(row) for row in data.get("name_record") or []]

    def get_all_name_records(self) -> List[IndexedNameRecord]:
        return self._query(GET_ALL_NAME_RECORDS)

    def get_name_records_by_domain(self, domain: Union[Pubkey, str]) -> List[IndexedNameRecord]:
        return self._query(GET_NAME_RECORDS_BY_DOMAIN, {"domain": str(domain)})

    def get_name_records_by_authority(self, authority: Union[Pubkey, str]) -> List[IndexedNameRecord]:
        return self._query(GET_NAME_RECORDS_BY_AUTHORITY, {"authority": str(authority)})


__all__ = ["IndexedNameRecord", "NameServiceClient"]
