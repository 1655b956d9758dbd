"""
Shared fixtures: an in-memory chain connection and keyring.
"""

import hashlib
from typing import Any, Dict, List, Optional

import pytest

from ssid.config import Settings
from ssid.models import DispatchFailure, MetaError, StatusEvent, TxStatus


DEV_MNEMONIC = "bottom drive obey lake curtain smoke basket hold race lonely fit walk"
BLOCK_HASH = "0x" + "ab" * 32
EXTRINSIC_HASH = "0x" + "cd" * 32


class FakeKeypair:
    def __init__(self, secret: str) -> None:
        self.public_key = hashlib.blake2b(secret.encode(), digest_size=32).digest()
        self.ss58_address = f"5Fake{self.public_key.hex()[:10]}"


class FakeKeyring:
    def __init__(self, valid_mnemonics=(DEV_MNEMONIC,)) -> None:
        self.valid_mnemonics = set(valid_mnemonics)

    def mnemonic_generate(self, words: int = 12) -> str:
        return DEV_MNEMONIC

    def mnemonic_validate(self, mnemonic: str) -> bool:
        return mnemonic in self.valid_mnemonics

    def keypair_from_mnemonic(self, mnemonic: str) -> FakeKeypair:
        return FakeKeypair(mnemonic)

    def keypair_from_uri(self, suri: str) -> FakeKeypair:
        return FakeKeypair(suri)

    def public_key_from_mnemonic(self, mnemonic: str) -> str:
        return f"0x{self.keypair_from_mnemonic(mnemonic).public_key.hex()}"


class FakeConnection:
    """Scripted chain connection.

    ``storage`` maps ``(module, storage_function)`` to a value or to an
    exception to raise; ``statuses`` is the status stream replayed for every
    watched extrinsic.
    """

    def __init__(
        self,
        storage: Optional[Dict[Any, Any]] = None,
        statuses: Optional[List[StatusEvent]] = None,
        meta_errors: Optional[Dict[Any, MetaError]] = None,
        submit_error: Optional[Exception] = None,
    ) -> None:
        self.storage = storage or {}
        self.statuses = statuses or []
        self.meta_errors = meta_errors or {}
        self.submit_error = submit_error
        self.queries: List[Any] = []
        self.calls: List[Any] = []
        self.signed: List[Any] = []
        self.submitted: List[Any] = []
        self.yielded = 0
        self.stream_closed = False
        self.closed = False

    async def query(self, module, storage_function, params=None):
        self.queries.append((module, storage_function, params))
        value = self.storage.get((module, storage_function))
        if isinstance(value, Exception):
            raise value
        return value

    async def compose_call(self, module, function, params):
        call = {"module": module, "function": function, "params": params}
        self.calls.append(call)
        return call

    async def sign(self, call, keypair):
        extrinsic = {"call": call, "signer": keypair}
        self.signed.append(extrinsic)
        return extrinsic

    async def watch_extrinsic(self, extrinsic):
        if self.submit_error is not None:
            raise self.submit_error
        self.submitted.append(extrinsic)
        try:
            for event in self.statuses:
                self.yielded += 1
                yield event
        finally:
            self.stream_closed = True

    async def submit_extrinsic(self, extrinsic):
        if self.submit_error is not None:
            raise self.submit_error
        self.submitted.append(extrinsic)
        return EXTRINSIC_HASH

    async def find_meta_error(self, module_index, error_index):
        return self.meta_errors[(module_index, error_index)]

    async def close(self):
        self.closed = True


def status(kind: TxStatus, block_hash: Optional[str] = None, dispatch_error: Optional[DispatchFailure] = None) -> StatusEvent:
    return StatusEvent(
        status=kind,
        block_hash=block_hash,
        extrinsic_hash=EXTRINSIC_HASH,
        dispatch_error=dispatch_error,
    )


@pytest.fixture
def keyring():
    return FakeKeyring()


@pytest.fixture
def settings():
    return Settings(network="local", signer_uri="//Alice", validator_uri="//Alice", api_key="")


@pytest.fixture
def signing_key():
    return FakeKeypair("//Alice")
