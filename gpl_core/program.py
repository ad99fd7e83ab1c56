"""
Program handles: instruction builders and account fetches for an Anchor program.

A `Program` pairs a program id with an `Idl` (its instruction table and account
layouts) and the RPC client used to reach the cluster. `Program.method()`
returns an `InstructionBuilder`; callers can inspect the resolved addresses with
`pubkeys()` before deciding to submit with `rpc()`.

Fetches never guess. `Program.fetch()` returns one of three results:

    Found(address, account)        the account exists and decoded cleanly
    Absent(address)                the node answered with no account
    TransportError(address, error) the call failed; existence is unknown
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple, Union

from construct import Struct
from solana.exceptions import SolanaRpcException
from solana.rpc.api import Client
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.core import RPCException
from solana.rpc.types import TxOpts
from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from .constants import SYSTEM_PROGRAM_ID
from .errors import (
    AccountNotFoundError,
    FetchError,
    MissingAccountError,
    MissingSignerError,
    TransactionError,
)
from .layouts import AccountLayout, encode_instruction

logger = logging.getLogger(__name__)

TRANSPORT_ERRORS = (SolanaRpcException, RPCException)

# Role defaults
WALLET = "wallet"
SYSTEM_PROGRAM = "system_program"

PdaResolver = Callable[[Mapping[str, Any], Mapping[str, Pubkey], Pubkey], Optional[Pubkey]]


@dataclass(frozen=True)
class AccountRole:
    name: str
    writable: bool = False
    signer: bool = False
    default: Optional[str] = None
    # Derives the address from the instruction args and the roles resolved so far
    pda: Optional[PdaResolver] = None


@dataclass(frozen=True)
class InstructionDef:
    name: str
    args: Struct
    accounts: Tuple[AccountRole, ...]


@dataclass(frozen=True)
class Idl:
    name: str
    instructions: Mapping[str, InstructionDef]
    accounts: Mapping[str, AccountLayout]


@dataclass(frozen=True)
class Found:
    address: Pubkey
    account: Any


@dataclass(frozen=True)
class Absent:
    address: Pubkey


@dataclass(frozen=True)
class TransportError:
    address: Pubkey
    error: Exception


FetchResult = Union[Found, Absent, TransportError]


class PreparedInstruction(NamedTuple):
    """An unsubmitted builder plus the address it will create."""

    builder: "InstructionBuilder"
    address: Pubkey


def as_pubkey(value: Union[Pubkey, str]) -> Pubkey:
    if isinstance(value, Pubkey):
        return value
    if isinstance(value, str):
        return Pubkey.from_string(value)
    raise TypeError(f"expected Pubkey or base58 str, got {type(value).__name__}")


class InstructionBuilder:
    def __init__(self, program: "Program", ix: InstructionDef, args: Dict[str, Any]):
        self.program = program
        self.ix = ix
        self.args = args
        self._accounts: Dict[str, Pubkey] = {}

    def __repr__(self) -> str:
        return f"InstructionBuilder({self.program.idl.name}.{self.ix.name})"

    def accounts(self, **roles: Union[Pubkey, str, None]) -> "InstructionBuilder":
        known = {r.name for r in self.ix.accounts}
        for name, value in roles.items():
            if name not in known:
                raise ValueError(f"{self.ix.name} has no account '{name}'")
            if value is not None:
                self._accounts[name] = as_pubkey(value)
        return self

    def pubkeys(self) -> Dict[str, Pubkey]:
        """Resolve every account role to an address, in IDL order."""
        resolved: Dict[str, Pubkey] = {}
        wallet = self.program.wallet
        for role in self.ix.accounts:
            if role.name in self._accounts:
                resolved[role.name] = self._accounts[role.name]
            elif role.default == WALLET and wallet is not None:
                resolved[role.name] = wallet.pubkey()
            elif role.default == SYSTEM_PROGRAM:
                resolved[role.name] = SYSTEM_PROGRAM_ID

        for role in self.ix.accounts:
            if role.name in resolved or role.pda is None:
                continue
            key = role.pda(self.args, resolved, self.program.program_id)
            if key is not None:
                resolved[role.name] = key

        # Report a missing input before the address that could not be derived from it
        missing = sorted(
            (role for role in self.ix.accounts if role.name not in resolved),
            key=lambda role: role.pda is not None,
        )
        if missing:
            raise MissingAccountError(self.ix.name, missing[0].name)
        return {role.name: resolved[role.name] for role in self.ix.accounts}

    def instruction(self) -> Instruction:
        keys = self.pubkeys()
        metas = [
            AccountMeta(pubkey=keys[role.name], is_signer=role.signer, is_writable=role.writable)
            for role in self.ix.accounts
        ]
        data = encode_instruction(self.ix.name, self.ix.args, self.args)
        return Instruction(self.program.program_id, data, metas)

    def _payer(self) -> Keypair:
        wallet = self.program.wallet
        if wallet is None:
            raise MissingSignerError(f"{self.ix.name}: no wallet configured to pay for the transaction")
        return wallet

    def _keypairs(self, wallet: Keypair, ix: Instruction, signers: Sequence[Keypair]) -> List[Keypair]:
        """The wallet first, then one keypair per signer account; unused keypairs are dropped."""
        available = {kp.pubkey(): kp for kp in signers}
        keypairs = [wallet]
        for meta in ix.accounts:
            if not meta.is_signer or meta.pubkey == wallet.pubkey():
                continue
            kp = available.get(meta.pubkey)
            if kp is None:
                raise MissingSignerError(f"{self.ix.name}: no keypair given for signer {meta.pubkey}")
            if all(k.pubkey() != meta.pubkey for k in keypairs):
                keypairs.append(kp)
        return keypairs

    def transaction(self, recent_blockhash: Hash, signers: Sequence[Keypair] = ()) -> Transaction:
        wallet = self._payer()
        ix = self.instruction()
        keypairs = self._keypairs(wallet, ix, signers)
        return Transaction.new_signed_with_payer([ix], wallet.pubkey(), keypairs, recent_blockhash)

    def rpc(self, signers: Sequence[Keypair] = ()) -> Signature:
        """Sign, submit and wait for confirmation. Returns the transaction signature."""
        client = self.program.client
        commitment = self.program.commitment
        wallet = self._payer()
        ix = self.instruction()
        keypairs = self._keypairs(wallet, ix, signers)
        blockhash = client.get_latest_blockhash(commitment).value.blockhash
        tx = Transaction.new_signed_with_payer([ix], wallet.pubkey(), keypairs, blockhash)
        opts = TxOpts(skip_confirmation=False, preflight_commitment=commitment)
        try:
            resp = client.send_raw_transaction(bytes(tx), opts=opts)
        except RPCException as e:
            raise TransactionError(self.ix.name, str(e)) from e
        logger.debug("%s submitted: %s", self.ix.name, resp.value)
        return resp.value


@dataclass
class Program:
    program_id: Pubkey
    idl: Idl
    client: Client
    wallet: Optional[Keypair] = None
    commitment: Commitment = field(default=Confirmed)

    def method(self, name: str, /, **args: Any) -> InstructionBuilder:
        try:
            ix = self.idl.instructions[name]
        except KeyError:
            raise ValueError(f"{self.idl.name} has no instruction '{name}'") from None
        return InstructionBuilder(self, ix, args)

    def fetch(self, account: str, address: Union[Pubkey, str]) -> FetchResult:
        layout = self.idl.accounts[account]
        address = as_pubkey(address)
        try:
            res = self.client.get_account_info(address, commitment=self.commitment)
        except TRANSPORT_ERRORS as e:
            logger.debug("get_account_info %s failed: %s", address, e)
            return TransportError(address, e)
        if res.value is None:
            return Absent(address)
        return Found(address, layout.decode(address, res.value.data))

    def get(self, account: str, address: Union[Pubkey, str]) -> Any:
        result = self.fetch(account, address)
        if isinstance(result, Found):
            return result.account
        if isinstance(result, Absent):
            raise AccountNotFoundError(account, str(result.address))
        raise FetchError(account, str(result.address), str(result.error)) from result.error


def get_or_create(
    program: Program,
    account: str,
    address: Pubkey,
    build: Callable[[], InstructionBuilder],
    signers: Sequence[Keypair] = (),
) -> Pubkey:
    """
    Return `address`, submitting `build()` first if the account is absent.

    A transport failure while checking raises `FetchError` and nothing is
    submitted. Two callers can both see the account as absent; the program
    rejects the second creation, in which case the account is fetched once
    more and the address is returned if it now exists.
    """
    result = program.fetch(account, address)
    if isinstance(result, Found):
        return address
    if isinstance(result, TransportError):
        raise FetchError(account, str(address), str(result.error)) from result.error

    logger.info("%s %s not found, creating", account, address)
    try:
        build().rpc(signers)
    except TransactionError:
        if isinstance(program.fetch(account, address), Found):
            logger.warning("%s %s was created by a concurrent request", account, address)
            return address
        raise
    return address


__all__ = [
    "WALLET",
    "SYSTEM_PROGRAM",
    "AccountRole",
    "InstructionDef",
    "Idl",
    "Found",
    "Absent",
    "TransportError",
    "FetchResult",
    "PreparedInstruction",
    "InstructionBuilder",
    "Program",
    "as_pubkey",
    "get_or_create",
]
