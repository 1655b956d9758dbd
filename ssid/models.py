from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class TxStatus(str, Enum):
    FUTURE = "future"
    READY = "ready"
    BROADCAST = "broadcast"
    IN_BLOCK = "inBlock"
    RETRACTED = "retracted"
    FINALITY_TIMEOUT = "finalityTimeout"
    FINALIZED = "finalized"
    USURPED = "usurped"
    DROPPED = "dropped"
    INVALID = "invalid"


POOL_TERMINAL_STATUSES = {
    TxStatus.FINALITY_TIMEOUT,
    TxStatus.USURPED,
    TxStatus.DROPPED,
    TxStatus.INVALID,
}


class DIDDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    public_key: str
    identity: str
    metadata: str = ""


class DIDDetails(BaseModel):
    identifier: str
    public_key: str
    metadata: str
    added_block: int


class DispatchFailure(BaseModel):
    is_module: bool
    module_index: Optional[int] = None
    error_index: Optional[int] = None
    description: str = ""


class StatusEvent(BaseModel):
    status: TxStatus
    block_hash: Optional[str] = None
    extrinsic_hash: Optional[str] = None
    dispatch_error: Optional[DispatchFailure] = None

    @property
    def is_terminal(self) -> bool:
        return (
            self.dispatch_error is not None
            or self.status == TxStatus.FINALIZED
            or self.status in POOL_TERMINAL_STATUSES
        )


class MetaError(BaseModel):
    section: str
    name: str
    documentation: List[str] = Field(default_factory=list)


class Finalized(BaseModel):
    kind: Literal["finalized"] = "finalized"
    block_hash: str
    extrinsic_hash: Optional[str] = None

    @property
    def ok(self) -> bool:
        return True

    def describe(self) -> str:
        return f"Finalized in block {self.block_hash}"


class Accepted(BaseModel):
    kind: Literal["accepted"] = "accepted"
    extrinsic_hash: str

    @property
    def ok(self) -> bool:
        return True

    def describe(self) -> str:
        return f"Accepted as extrinsic {self.extrinsic_hash}"


class ModuleError(BaseModel):
    kind: Literal["moduleError"] = "moduleError"
    section: str
    name: str
    documentation: str = ""

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        return f"{self.section}.{self.name}: {self.documentation}"


class DispatchError(BaseModel):
    kind: Literal["dispatchError"] = "dispatchError"
    description: str

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        return f"Dispatch error: {self.description}"


class SubmissionError(BaseModel):
    kind: Literal["submissionError"] = "submissionError"
    cause: str

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        return f"Submission failed: {self.cause}"


TransactionOutcome = Annotated[
    Union[Finalized, Accepted, ModuleError, DispatchError, SubmissionError],
    Field(discriminator="kind"),
]


class GenerateDidRequest(BaseModel):
    mnemonic: str
    identifier: str
    metadata: str = ""


class RegisterDidRequest(GenerateDidRequest):
    pass


class RegisterDidResponse(BaseModel):
    did: DIDDocument
    block_hash: str


class RotateKeyRequest(BaseModel):
    public_key: str


class UpdateMetadataRequest(BaseModel):
    metadata: str


class TransactionResponse(BaseModel):
    identifier: str
    outcome: TransactionOutcome


class AppInfo(BaseModel):
    network: str
    ss58_format: int
    crypto_type: str
    finalize_updates: bool
    signer_configured: bool
    validator_configured: bool
