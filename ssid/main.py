from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
import logging

from .config import settings
from .did_registry import DidRegistry
from .errors import ChainServiceError, FetchFailed, SsidError, TransactionFailed
from .identifier import to_did
from .models import (
    AppInfo,
    DIDDetails,
    DIDDocument,
    GenerateDidRequest,
    RegisterDidRequest,
    RegisterDidResponse,
    RotateKeyRequest,
    TransactionResponse,
    UpdateMetadataRequest,
)


logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

registry = DidRegistry(settings)

app = FastAPI(title=settings.app_name)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def require_api_key(x_api_key: str = Header(default="")) -> None:
    if settings.api_key and x_api_key != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")


def http_error(exc: SsidError) -> HTTPException:
    if isinstance(exc, ChainServiceError):
        return HTTPException(status_code=503, detail=exc.message)
    if isinstance(exc, FetchFailed):
        return HTTPException(status_code=404, detail=exc.message)
    if isinstance(exc, TransactionFailed):
        return HTTPException(status_code=400, detail=exc.outcome.model_dump())
    return HTTPException(status_code=400, detail={"error_code": exc.error_code, "message": exc.message})


@app.on_event("shutdown")
async def shutdown() -> None:
    await registry.close()


@app.get("/api/info", response_model=AppInfo)
async def info() -> AppInfo:
    return AppInfo(
        network=settings.network,
        ss58_format=settings.ss58_format,
        crypto_type=settings.crypto_type,
        finalize_updates=settings.finalize_updates,
        signer_configured=bool(settings.signer_uri),
        validator_configured=bool(settings.validator_uri),
    )


@app.post("/api/mnemonic")
async def new_mnemonic():
    try:
        return {"mnemonic": registry.generate_mnemonic()}
    except SsidError as exc:
        raise http_error(exc) from exc


@app.post("/api/did/generate", response_model=DIDDocument)
async def generate(payload: GenerateDidRequest) -> DIDDocument:
    try:
        return await registry.generate_did(payload.mnemonic, payload.identifier, payload.metadata)
    except SsidError as exc:
        raise http_error(exc) from exc


@app.post("/api/did/register", response_model=RegisterDidResponse)
async def register(payload: RegisterDidRequest, _: None = Depends(require_api_key)) -> RegisterDidResponse:
    try:
        document = await registry.generate_did(
            payload.mnemonic, payload.identifier, payload.metadata
        )
        block_hash = await registry.store_did_on_chain(document, registry.signer())
    except SsidError as exc:
        raise http_error(exc) from exc
    return RegisterDidResponse(did=document, block_hash=block_hash)


@app.get("/api/did/{identifier}", response_model=DIDDetails)
async def did_details(identifier: str) -> DIDDetails:
    try:
        return await registry.get_did_details(to_did(identifier))
    except SsidError as exc:
        raise http_error(exc) from exc


@app.get("/api/did/{identifier}/account")
async def did_account(identifier: str):
    try:
        account = await registry.resolve_did_to_account(to_did(identifier))
    except SsidError as exc:
        raise http_error(exc) from exc
    if not account:
        raise HTTPException(status_code=404, detail="No account bound to this DID")
    return {"did": to_did(identifier), "account_id": account}


@app.get("/api/did/{identifier}/keys")
async def did_key_history(identifier: str):
    try:
        keys = await registry.get_did_key_history(to_did(identifier))
    except SsidError as exc:
        raise http_error(exc) from exc
    return {"did": to_did(identifier), "previous_keys": keys}


@app.get("/api/did/{identifier}/validator")
async def did_validator(identifier: str):
    try:
        is_validator = await registry.is_did_validator(to_did(identifier))
    except SsidError as exc:
        raise http_error(exc) from exc
    return {"did": to_did(identifier), "is_validator": is_validator}


@app.get("/api/account/{account_id}/did")
async def account_did(account_id: str):
    try:
        did = await registry.resolve_account_id_to_did(account_id)
    except SsidError as exc:
        raise http_error(exc) from exc
    return {"account_id": account_id, "did": did}


@app.post("/api/did/{identifier}/rotate-key", response_model=TransactionResponse)
async def rotate_key(
    identifier: str, payload: RotateKeyRequest, _: None = Depends(require_api_key)
) -> TransactionResponse:
    did = to_did(identifier)
    try:
        outcome = await registry.submit(
            registry.rotate_key_call(did, payload.public_key), registry.validator()
        )
    except SsidError as exc:
        raise http_error(exc) from exc
    if not outcome.ok:
        raise http_error(TransactionFailed(outcome))
    return TransactionResponse(identifier=did, outcome=outcome)


@app.post("/api/did/{identifier}/metadata", response_model=TransactionResponse)
async def update_metadata(
    identifier: str, payload: UpdateMetadataRequest, _: None = Depends(require_api_key)
) -> TransactionResponse:
    did = to_did(identifier)
    try:
        outcome = await registry.submit(
            registry.update_metadata_call(did, payload.metadata), registry.validator()
        )
    except SsidError as exc:
        raise http_error(exc) from exc
    if not outcome.ok:
        raise http_error(TransactionFailed(outcome))
    return TransactionResponse(identifier=did, outcome=outcome)
