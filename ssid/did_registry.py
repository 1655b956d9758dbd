import logging
from typing import Any, List, Optional, Union

from .chain import ChainConnection, build_connection
from .config import Settings
from .document import generate_did, generate_mnemonic
from .errors import ChainServiceError
from .keyring import Keyring
from .models import DIDDetails, DIDDocument, SubmissionError, TransactionOutcome
from .resolver import (
    get_did_details,
    get_did_key_history,
    is_did_validator,
    resolve_account_id_to_did,
    resolve_did_to_account,
)
from .submitter import CreateDID, RotateKey, UpdateMetadata, raise_for_outcome, submit


logger = logging.getLogger(__name__)


class DidRegistry:
    """Entry point for callers; supplies the default connection and signers."""

    def __init__(self, settings: Settings, keyring: Optional[Keyring] = None) -> None:
        self.settings = settings
        self.keyring = keyring or Keyring(settings)
        self._connection: Optional[ChainConnection] = None

    async def connection(self, connection: Optional[ChainConnection] = None) -> ChainConnection:
        if connection is not None:
            return connection
        if self._connection is None:
            logger.info(f"No connection supplied, using default {self.settings.network} network")
            self._connection = await build_connection(self.settings.network, self.settings)
        return self._connection

    async def close(self) -> None:
        if self._connection is None:
            return
        await self._connection.close()
        self._connection = None

    def signer(self) -> Any:
        if not self.settings.signer_uri:
            raise ChainServiceError("Missing signer uri, set SSID_SIGNER_URI")
        return self.keyring.keypair_from_uri(self.settings.signer_uri)

    def validator(self) -> Any:
        if not self.settings.validator_uri:
            raise ChainServiceError("Missing validator uri, set SSID_VALIDATOR_URI")
        return self.keyring.keypair_from_uri(self.settings.validator_uri)

    def generate_mnemonic(self) -> str:
        return generate_mnemonic(self.keyring)

    async def generate_did(self, mnemonic: str, identifier: str, metadata: str = "") -> DIDDocument:
        return await generate_did(mnemonic, identifier, self.keyring, metadata)

    def rotate_key_call(self, identifier: str, new_key: str) -> RotateKey:
        return RotateKey(
            identifier=identifier,
            new_key=new_key,
            wait_for_finalization=self.settings.finalize_updates,
        )

    def update_metadata_call(self, identifier: str, metadata: str) -> UpdateMetadata:
        return UpdateMetadata(
            identifier=identifier,
            metadata=metadata,
            wait_for_finalization=self.settings.finalize_updates,
        )

    async def submit(self, call, signing_key: Any, connection: Optional[ChainConnection] = None) -> TransactionOutcome:
        try:
            connection = await self.connection(connection)
        except ChainServiceError as exc:
            logger.error(f"Cannot submit {call.call_function}: {exc.message}")
            return SubmissionError(cause=exc.message)
        return await submit(call, signing_key, connection)

    async def store_did_on_chain(
        self,
        document: DIDDocument,
        signing_key: Any,
        connection: Optional[ChainConnection] = None,
    ) -> str:
        outcome = await self.submit(CreateDID(document=document), signing_key, connection)
        return raise_for_outcome(outcome)

    async def update_did_key(
        self,
        identifier: str,
        new_key: str,
        signing_key: Any,
        connection: Optional[ChainConnection] = None,
    ) -> str:
        call = self.rotate_key_call(identifier, new_key)
        return raise_for_outcome(await self.submit(call, signing_key, connection))

    async def update_metadata(
        self,
        identifier: str,
        metadata: str,
        signing_key: Any,
        connection: Optional[ChainConnection] = None,
    ) -> str:
        call = self.update_metadata_call(identifier, metadata)
        return raise_for_outcome(await self.submit(call, signing_key, connection))

    async def get_did_details(self, identifier: str, connection: Optional[ChainConnection] = None) -> DIDDetails:
        return await get_did_details(identifier, await self.connection(connection))

    async def resolve_did_to_account(
        self, identifier: str, connection: Optional[ChainConnection] = None
    ) -> Optional[str]:
        return await resolve_did_to_account(identifier, await self.connection(connection))

    async def resolve_account_id_to_did(
        self, account_id: str, connection: Optional[ChainConnection] = None
    ) -> Union[str, bool]:
        return await resolve_account_id_to_did(account_id, await self.connection(connection))

    async def is_did_validator(self, identifier: str, connection: Optional[ChainConnection] = None) -> bool:
        return await is_did_validator(identifier, await self.connection(connection))

    async def get_did_key_history(
        self, identifier: str, connection: Optional[ChainConnection] = None
    ) -> List[Any]:
        return await get_did_key_history(identifier, await self.connection(connection))
