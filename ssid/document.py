import asyncio
import logging

from .config import IDENTIFIER_PREFIX
from .errors import InvalidMnemonic
from .identifier import validate_identifier
from .keyring import Keyring
from .models import DIDDocument


logger = logging.getLogger(__name__)


def generate_mnemonic(keyring: Keyring) -> str:
    return keyring.mnemonic_generate()


async def generate_did(
    mnemonic: str, identifier: str, keyring: Keyring, metadata: str = ""
) -> DIDDocument:
    """Build the DID record to be stored on chain.

    The mnemonic is checked before the identifier and nothing is derived
    unless both pass, so a failure never leaves a partial document behind.
    """
    if not keyring.mnemonic_validate(mnemonic):
        raise InvalidMnemonic("Not valid mnemonic supplied")
    validate_identifier(identifier)

    loop = asyncio.get_running_loop()
    public_key = await loop.run_in_executor(None, keyring.public_key_from_mnemonic, mnemonic)
    did = IDENTIFIER_PREFIX + identifier
    logger.info(f"Generated DID {did}")
    return DIDDocument(public_key=public_key, identity=did, metadata=metadata)
