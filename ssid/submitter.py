"""
Signed DID transactions and their finality tracking.

A submission resolves exactly once to a ``TransactionOutcome``. Failures of
the chain or of the transport are returned as outcomes, never raised; callers
that prefer exceptions use ``raise_for_outcome``.
"""

from enum import Enum
import logging
from typing import Any, ClassVar, Dict, Optional

from pydantic import BaseModel

from .chain import ChainConnection
from .errors import TransactionFailed
from .identifier import encode_fixed_width
from .models import (
    Accepted,
    DIDDocument,
    DispatchError,
    Finalized,
    ModuleError,
    POOL_TERMINAL_STATUSES,
    StatusEvent,
    SubmissionError,
    TransactionOutcome,
    TxStatus,
)


logger = logging.getLogger(__name__)

DID_PALLET = "Did"


class SubmissionState(str, Enum):
    SUBMITTED = "SUBMITTED"
    BROADCASTING = "BROADCASTING"
    IN_BLOCK = "IN_BLOCK"
    FINALIZED = "FINALIZED"
    MODULE_ERROR = "MODULE_ERROR"
    DISPATCH_ERROR = "DISPATCH_ERROR"
    FAILED = "FAILED"


TERMINAL_STATES = {
    SubmissionState.FINALIZED,
    SubmissionState.MODULE_ERROR,
    SubmissionState.DISPATCH_ERROR,
    SubmissionState.FAILED,
}


class CreateDID(BaseModel):
    call_function: ClassVar[str] = "add"

    document: DIDDocument
    wait_for_finalization: bool = True

    def call_params(self) -> Dict[str, Any]:
        return {
            "public_key": self.document.public_key,
            "identifier": encode_fixed_width(self.document.identity),
            "metadata": self.document.metadata,
        }


class RotateKey(BaseModel):
    call_function: ClassVar[str] = "rotate_key"

    identifier: str
    new_key: str
    wait_for_finalization: bool = False

    def call_params(self) -> Dict[str, Any]:
        return {
            "identifier": encode_fixed_width(self.identifier),
            "public_key": self.new_key,
        }


class UpdateMetadata(BaseModel):
    call_function: ClassVar[str] = "update_metadata"

    identifier: str
    metadata: str
    wait_for_finalization: bool = False

    def call_params(self) -> Dict[str, Any]:
        return {
            "identifier": encode_fixed_width(self.identifier),
            "metadata": self.metadata,
        }


class TransactionTracker:
    """Folds the extrinsic status stream into a single outcome."""

    def __init__(self, connection: ChainConnection) -> None:
        self.connection = connection
        self.state = SubmissionState.SUBMITTED
        self.outcome: Optional[TransactionOutcome] = None

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_STATES

    async def advance(self, event: StatusEvent) -> Optional[TransactionOutcome]:
        if self.done:
            return self.outcome
        logger.info(f"Transaction status: {event.status.value}")

        if event.dispatch_error is not None:
            failure = event.dispatch_error
            if failure.is_module:
                meta = await self.connection.find_meta_error(
                    failure.module_index, failure.error_index
                )
                documentation = " ".join(meta.documentation)
                logger.error(f"{meta.section}.{meta.name}: {documentation}")
                return self._resolve(
                    SubmissionState.MODULE_ERROR,
                    ModuleError(section=meta.section, name=meta.name, documentation=documentation),
                )
            logger.error(f"Dispatch error: {failure.description}")
            return self._resolve(
                SubmissionState.DISPATCH_ERROR, DispatchError(description=failure.description)
            )

        if event.status == TxStatus.FINALIZED:
            logger.info(f"Finalized block hash {event.block_hash}")
            return self._resolve(
                SubmissionState.FINALIZED,
                Finalized(block_hash=event.block_hash, extrinsic_hash=event.extrinsic_hash),
            )
        if event.status in POOL_TERMINAL_STATUSES:
            logger.error(f"Transaction left the pool: {event.status.value}")
            return self._resolve(
                SubmissionState.FAILED, SubmissionError(cause=f"Transaction {event.status.value}")
            )

        if event.status == TxStatus.IN_BLOCK:
            self.state = SubmissionState.IN_BLOCK
        else:
            # ready, broadcast, future and retracted all mean the extrinsic is in the pool
            self.state = SubmissionState.BROADCASTING
        return None

    def _resolve(self, state: SubmissionState, outcome: TransactionOutcome) -> TransactionOutcome:
        self.state = state
        self.outcome = outcome
        return outcome


async def submit(call, signing_key: Any, connection: ChainConnection) -> TransactionOutcome:
    # encoding errors surface before anything touches the network
    params = call.call_params()
    try:
        ledger_call = await connection.compose_call(DID_PALLET, call.call_function, params)
        extrinsic = await connection.sign(ledger_call, signing_key)
        if not call.wait_for_finalization:
            extrinsic_hash = await connection.submit_extrinsic(extrinsic)
            logger.info(f"Transaction submitted: {extrinsic_hash}")
            return Accepted(extrinsic_hash=extrinsic_hash)

        tracker = TransactionTracker(connection)
        stream = connection.watch_extrinsic(extrinsic)
        try:
            async for event in stream:
                outcome = await tracker.advance(event)
                if outcome is not None:
                    return outcome
        finally:
            await stream.aclose()
    except Exception as exc:
        logger.error(f"Transaction submission failed: {exc}")
        return SubmissionError(cause=str(exc) or type(exc).__name__)
    return SubmissionError(cause="Status stream ended before a terminal status")


def raise_for_outcome(outcome: TransactionOutcome) -> str:
    if isinstance(outcome, Finalized):
        return outcome.block_hash
    if isinstance(outcome, Accepted):
        return outcome.extrinsic_hash
    raise TransactionFailed(outcome)