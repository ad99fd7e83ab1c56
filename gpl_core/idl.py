"""Instruction and account tables for the core and nameservice programs.

Account order in each `InstructionDef` is the order the program expects on
the wire.
"""

from .layouts import (
    BADGE,
    CREATE_SCHEMA_ARGS,
    ISSUER,
    METADATA_URI_ARGS,
    NAME_ARGS,
    NAME_RECORD,
    NO_ARGS,
    SCHEMA,
    TLD_ARGS,
)
from .pda import (
    find_badge_address,
    find_issuer_address,
    find_name_record_address,
    find_schema_address,
    find_tld_address,
)
from .program import SYSTEM_PROGRAM, WALLET, AccountRole, Idl, InstructionDef


def _tld_pda(args, accounts, program_id):
    return find_tld_address(args["tld"], program_id)[0]


def _name_record_pda(args, accounts, program_id):
    if "domain" not in accounts:
        return None
    return find_name_record_address(args["name"], accounts["domain"], program_id)[0]


def _badge_pda(args, accounts, program_id):
    if not all(k in accounts for k in ("issuer", "schema", "holder")):
        return None
    return find_badge_address(
        accounts["issuer"], accounts["schema"], accounts["holder"], program_id
    )[0]


def _issuer_pda(args, accounts, program_id):
    if "authority" not in accounts:
        return None
    return find_issuer_address(accounts["authority"], program_id)[0]


def _schema_pda(args, accounts, program_id):
    return find_schema_address(args["random_hash"], program_id)[0]


def _payer(name="authority"):
    return AccountRole(name, writable=True, signer=True, default=WALLET)


_SYSTEM = AccountRole("system_program", default=SYSTEM_PROGRAM)


NAMESERVICE_IDL = Idl(
    name="gpl_nameservice",
    instructions={
        "create_tld": InstructionDef(
            "create_tld",
            TLD_ARGS,
            (
                AccountRole("name_record", writable=True, pda=_tld_pda),
                _payer(),
                _SYSTEM,
            ),
        ),
        "create_name_record": InstructionDef(
            "create_name_record",
            NAME_ARGS,
            (
                AccountRole("name_record", writable=True, pda=_name_record_pda),
                AccountRole("domain"),
                _payer(),
                _SYSTEM,
            ),
        ),
        "transfer_name_record": InstructionDef(
            "transfer_name_record",
            NO_ARGS,
            (
                AccountRole("name_record", writable=True),
                AccountRole("authority", signer=True, default=WALLET),
                AccountRole("new_authority"),
            ),
        ),
    },
    accounts={"NameRecord": NAME_RECORD},
)


CORE_IDL = Idl(
    name="gpl_core",
    instructions={
        "create_badge": InstructionDef(
            "create_badge",
            METADATA_URI_ARGS,
            (
                AccountRole("badge", writable=True, pda=_badge_pda),
                AccountRole("issuer"),
                AccountRole("schema"),
                AccountRole("holder"),
                AccountRole("update_authority"),
                _payer(),
                _SYSTEM,
            ),
        ),
        "update_badge": InstructionDef(
            "update_badge",
            METADATA_URI_ARGS,
            (
                AccountRole("badge", writable=True),
                AccountRole("issuer"),
                AccountRole("schema"),
                _payer("signer"),
            ),
        ),
        "burn_badge": InstructionDef(
            "burn_badge",
            NO_ARGS,
            (
                AccountRole("badge", writable=True),
                AccountRole("issuer"),
                AccountRole("schema"),
                AccountRole("holder"),
                _payer("signer"),
            ),
        ),
        "create_issuer": InstructionDef(
            "create_issuer",
            NO_ARGS,
            (
                AccountRole("issuer", writable=True, pda=_issuer_pda),
                _payer(),
                _SYSTEM,
            ),
        ),
        "verify_issuer": InstructionDef(
            "verify_issuer",
            NO_ARGS,
            (
                AccountRole("issuer", writable=True),
                _payer("signer"),
            ),
        ),
        "delete_issuer": InstructionDef(
            "delete_issuer",
            NO_ARGS,
            (
                AccountRole("issuer", writable=True),
                _payer(),
            ),
        ),
        "create_schema": InstructionDef(
            "create_schema",
            CREATE_SCHEMA_ARGS,
            (
                AccountRole("schema", writable=True, pda=_schema_pda),
                _payer(),
                _SYSTEM,
            ),
        ),
        "update_schema": InstructionDef(
            "update_schema",
            METADATA_URI_ARGS,
            (
                AccountRole("schema", writable=True),
                _payer(),
            ),
        ),
        "delete_schema": InstructionDef(
            "delete_schema",
            NO_ARGS,
            (
                AccountRole("schema", writable=True),
                _payer(),
            ),
        ),
    },
    accounts={"Badge": BADGE, "Issuer": ISSUER, "Schema": SCHEMA},
)

__all__ = ["NAMESERVICE_IDL", "CORE_IDL"]
