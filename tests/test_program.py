import logging
from unittest.mock import MagicMock

import pytest
from solana.rpc.core import RPCException
from solders.hash import Hash
from solders.keypair import Keypair
from solders.signature import Signature

from conftest import account_info
from gpl_core.constants import SYSTEM_PROGRAM_ID
from gpl_core.errors import (
    AccountNotFoundError,
    FetchError,
    MissingAccountError,
    MissingSignerError,
    TransactionError,
)
from gpl_core.layouts import ISSUER, instruction_discriminator
from gpl_core.pda import find_issuer_address
from gpl_core.program import Absent, Found, TransportError, get_or_create


def _issuer_data(authority, verified=False):
    return ISSUER.encode(authority=authority, verified=verified)


def _accept_submissions(client):
    client.get_latest_blockhash.return_value = MagicMock(value=MagicMock(blockhash=Hash.default()))
    client.send_raw_transaction.return_value = MagicMock(value=Signature.default())


def test_fetch_absent(sdk, client, keys):
    client.get_account_info.return_value = account_info(None)
    result = sdk.program.fetch("Issuer", keys[0])
    assert result == Absent(keys[0])


def test_fetch_found_decodes(sdk, client, keys):
    client.get_account_info.return_value = account_info(_issuer_data(keys[1], verified=True))
    result = sdk.program.fetch("Issuer", str(keys[0]))
    assert isinstance(result, Found)
    assert result.address == keys[0]
    assert result.account.authority == keys[1]
    assert result.account.verified is True


def test_fetch_transport_failure_is_not_absence(sdk, client, keys):
    err = RPCException("node is behind")
    client.get_account_info.side_effect = err
    result = sdk.program.fetch("Issuer", keys[0])
    assert isinstance(result, TransportError)
    assert result.error is err


def test_get_raises_by_outcome(sdk, client, keys):
    client.get_account_info.return_value = account_info(None)
    with pytest.raises(AccountNotFoundError):
        sdk.program.get("Issuer", keys[0])

    client.get_account_info.side_effect = RPCException("timeout")
    with pytest.raises(FetchError) as exc:
        sdk.program.get("Issuer", keys[0])
    assert isinstance(exc.value.__cause__, RPCException)


def test_pubkeys_resolves_pda_wallet_and_system_program(sdk, wallet):
    builder = sdk.program.method("create_issuer")
    keys = builder.pubkeys()
    assert list(keys) == ["issuer", "authority", "system_program"]
    assert keys["authority"] == wallet.pubkey()
    assert keys["system_program"] == SYSTEM_PROGRAM_ID
    assert keys["issuer"] == find_issuer_address(wallet.pubkey(), sdk.program.program_id)[0]


def test_explicit_accounts_take_precedence(sdk, keys):
    builder = sdk.program.method("create_issuer").accounts(authority=keys[0])
    assert builder.pubkeys()["issuer"] == find_issuer_address(keys[0], sdk.program.program_id)[0]


def test_instruction_account_metas(sdk, wallet):
    ix = sdk.program.method("create_issuer").instruction()
    assert ix.program_id == sdk.program.program_id
    assert ix.data == instruction_discriminator("create_issuer")
    flags = [(m.is_signer, m.is_writable) for m in ix.accounts]
    assert flags == [(False, True), (True, True), (False, False)]
    assert ix.accounts[1].pubkey == wallet.pubkey()


def test_missing_account_without_wallet(readonly_sdk):
    with pytest.raises(MissingAccountError) as exc:
        readonly_sdk.program.method("create_issuer").pubkeys()
    assert exc.value.role == "authority"


def test_unknown_role_and_method(sdk, keys):
    with pytest.raises(ValueError):
        sdk.program.method("create_issuer").accounts(holder=keys[0])
    with pytest.raises(ValueError):
        sdk.program.method("mint_everything")


def test_transaction_is_signed_by_wallet(sdk, wallet):
    tx = sdk.program.method("create_issuer").transaction(Hash.default())
    assert tx.message.account_keys[0] == wallet.pubkey()
    assert len(tx.signatures) == 1
    assert tx.signatures[0] != Signature.default()


def test_transaction_requires_wallet(readonly_sdk, keys):
    builder = readonly_sdk.program.method("create_issuer").accounts(authority=keys[0])
    with pytest.raises(MissingSignerError):
        builder.transaction(Hash.default())


def test_rpc_submits_and_waits_for_confirmation(sdk, client):
    _accept_submissions(client)
    sig = sdk.program.method("create_issuer").rpc()
    assert sig == Signature.default()
    raw, = client.send_raw_transaction.call_args.args
    assert isinstance(raw, bytes)
    assert client.send_raw_transaction.call_args.kwargs["opts"].skip_confirmation is False


def test_rpc_rejection_becomes_transaction_error(sdk, client):
    _accept_submissions(client)
    client.send_raw_transaction.side_effect = RPCException("account already in use")
    with pytest.raises(TransactionError) as exc:
        sdk.program.method("create_issuer").rpc()
    assert exc.value.instruction == "create_issuer"


def test_get_or_create_found_does_not_submit(sdk, client, keys):
    client.get_account_info.return_value = account_info(_issuer_data(keys[0]))
    build = MagicMock()
    assert get_or_create(sdk.program, "Issuer", keys[1], build) == keys[1]
    build.assert_not_called()


def test_get_or_create_absent_submits_once(sdk, client, keys):
    client.get_account_info.return_value = account_info(None)
    build = MagicMock()
    assert get_or_create(sdk.program, "Issuer", keys[1], build) == keys[1]
    build.assert_called_once_with()
    build.return_value.rpc.assert_called_once()


def test_get_or_create_transport_failure_never_creates(sdk, client, keys):
    client.get_account_info.side_effect = RPCException("connection reset")
    build = MagicMock()
    with pytest.raises(FetchError):
        get_or_create(sdk.program, "Issuer", keys[1], build)
    build.assert_not_called()


def test_get_or_create_lost_race_returns_address(sdk, client, keys, caplog):
    client.get_account_info.side_effect = [
        account_info(None),
        account_info(_issuer_data(keys[0])),
    ]
    build = MagicMock()
    build.return_value.rpc.side_effect = TransactionError("create_issuer", "already in use")
    with caplog.at_level(logging.WARNING, logger="gpl_core.program"):
        assert get_or_create(sdk.program, "Issuer", keys[1], build) == keys[1]
    assert "concurrent" in caplog.text


def test_get_or_create_rejection_propagates_when_still_absent(sdk, client, keys):
    client.get_account_info.return_value = account_info(None)
    build = MagicMock()
    build.return_value.rpc.side_effect = TransactionError("create_issuer", "unauthorized")
    with pytest.raises(TransactionError):
        get_or_create(sdk.program, "Issuer", keys[1], build)


def test_missing_account_names_input_not_derived_address(sdk, keys):
    builder = sdk.program.method("create_badge", metadata_uri="https://x/1.json").accounts(
        schema=keys[1], holder=keys[2], update_authority=keys[3]
    )
    with pytest.raises(MissingAccountError) as exc:
        builder.pubkeys()
    assert exc.value.role == "issuer"


def test_transaction_requires_keypair_for_other_signer(sdk, keys):
    builder = sdk.program.method("create_issuer").accounts(authority=keys[0])
    with pytest.raises(MissingSignerError) as exc:
        builder.transaction(Hash.default())
    assert str(keys[0]) in str(exc.value)


def test_transaction_signs_with_given_keypair(sdk, wallet):
    owner = Keypair.from_seed(bytes([8] * 32))
    builder = sdk.program.method("create_issuer").accounts(authority=owner.pubkey())
    tx = builder.transaction(Hash.default(), signers=[owner])
    assert tx.message.account_keys[:2] == [wallet.pubkey(), owner.pubkey()]
    assert len(tx.signatures) == 2


def test_transaction_drops_unneeded_keypairs(sdk):
    extra = Keypair.from_seed(bytes([9] * 32))
    tx = sdk.program.method("create_issuer").transaction(Hash.default(), signers=[extra])
    assert len(tx.signatures) == 1
    assert extra.pubkey() not in tx.message.account_keys


def test_rpc_without_wallet_makes_no_network_call(readonly_sdk, client, keys):
    builder = readonly_sdk.program.method("create_issuer").accounts(authority=keys[0])
    with pytest.raises(MissingSignerError):
        builder.rpc()
    client.get_latest_blockhash.assert_not_called()
    client.send_raw_transaction.assert_not_called()
