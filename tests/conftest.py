import os
import sys
from unittest.mock import MagicMock

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

# Add project root to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gpl_core import SDK


def account_info(data=None):
    """Shape of a get_account_info response; `None` means no account."""
    if data is None:
        return MagicMock(value=None)
    return MagicMock(value=MagicMock(data=data))


@pytest.fixture
def wallet():
    return Keypair.from_seed(bytes([7] * 32))


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def gql_client():
    return MagicMock()


@pytest.fixture
def sdk(client, wallet, gql_client):
    return SDK(client, wallet=wallet, gql_client=gql_client)


@pytest.fixture
def readonly_sdk(client, gql_client):
    return SDK(client, gql_client=gql_client)


@pytest.fixture
def keys():
    return [Pubkey.from_bytes(bytes([i] * 32)) for i in range(1, 6)]
