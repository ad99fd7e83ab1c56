from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID

# Devnet deployments
CORE_PROGRAM_ID = Pubkey.from_string("CDDMdCAWZkmEkHfDDDCGYwjHJdr5RfPg6oX1yZVhaNC5")
NAMESERVICE_PROGRAM_ID = Pubkey.from_string("5kWEYrdyryq3jGP5sUcKwTySzxr3dHzWFBVA3vkt6Nj5")

NAME_RECORD_PREFIX = b"name_record"
BADGE_PREFIX = b"badge"
ISSUER_PREFIX = b"issuer"
SCHEMA_PREFIX = b"schema"

# Parent of every top-level domain
ZERO_SCOPE = Pubkey.default()

RANDOM_HASH_LENGTH = 32

__all__ = [
    "CORE_PROGRAM_ID",
    "NAMESERVICE_PROGRAM_ID",
    "NAME_RECORD_PREFIX",
    "BADGE_PREFIX",
    "ISSUER_PREFIX",
    "SCHEMA_PREFIX",
    "ZERO_SCOPE",
    "RANDOM_HASH_LENGTH",
    "SYSTEM_PROGRAM_ID",
]
