import logging
from typing import Any, Dict, Mapping, Optional

from solana.rpc.api import Client
from solana.rpc.commitment import Commitment
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .badge import BadgeClient
from .config import SDKConfig, load_keypair
from .constants import CORE_PROGRAM_ID, NAMESERVICE_PROGRAM_ID
from .errors import ConfigError
from .graphql import GraphQLClient
from .idl import CORE_IDL, NAMESERVICE_IDL
from .nameservice import NameServiceClient
from .program import Program

logger = logging.getLogger(__name__)


class SDK:
    """Shared context for both program clients: RPC client, wallet, program handles, indexer."""

    def __init__(
        self,
        client: Client,
        wallet: Optional[Keypair] = None,
        gql_client: Optional[GraphQLClient] = None,
        core_program_id: Pubkey = CORE_PROGRAM_ID,
        nameservice_program_id: Pubkey = NAMESERVICE_PROGRAM_ID,
        commitment: str = "confirmed",
    ):
        self.client = client
        self.wallet = wallet
        self.gql_client = gql_client
        self.program = Program(core_program_id, CORE_IDL, client, wallet, Commitment(commitment))
        self.nameservice_program = Program(
            nameservice_program_id, NAMESERVICE_IDL, client, wallet, Commitment(commitment)
        )
        self.badge = BadgeClient(self)
        self.nameservice = NameServiceClient(self)

    def query(self, query: str, variables: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        if self.gql_client is None:
            raise ConfigError("indexed queries need a GraphQL client; pass gql_client or use SDK.from_config")
        return self.gql_client.request(query, variables)

    @classmethod
    def from_config(cls, config: Optional[SDKConfig] = None) -> "SDK":
        config = config or SDKConfig.from_env()
        wallet = load_keypair(config.keypair_path)
        if wallet is None:
            logger.info("no keypair at %s, SDK is read-only", config.keypair_path)
        return cls(
            client=Client(config.rpc_url, commitment=Commitment(config.commitment), timeout=config.timeout),
            wallet=wallet,
            gql_client=GraphQLClient(config.graphql_url, timeout=config.timeout),
            core_program_id=config.core_program_id,
            nameservice_program_id=config.nameservice_program_id,
            commitment=config.commitment,
        )


__all__ = ["SDK"]
