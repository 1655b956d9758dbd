import logging
from typing import Any, List, Optional, Union

from .chain import ChainConnection
from .errors import FetchFailed
from .identifier import encode_fixed_width
from .models import DIDDetails


logger = logging.getLogger(__name__)

# what the chain returns from RLookup for an account without a DID
EMPTY_DID = "0x" + "0" * 64


async def _query(
    connection: ChainConnection, module: str, storage_function: str, params: List[Any]
) -> Any:
    try:
        return await connection.query(module, storage_function, params)
    except Exception as exc:
        logger.error(f"Query {module}.{storage_function} failed: {exc}")
        raise FetchFailed(f"Failed to fetch {module}.{storage_function}") from exc


async def get_did_details(identifier: str, connection: ChainConnection) -> DIDDetails:
    data = await _query(connection, "Did", "DIDs", [encode_fixed_width(identifier)])
    try:
        did, added_block = data
        return DIDDetails(
            identifier=did["identifier"],
            public_key=did["public_key"],
            metadata=did["metadata"],
            added_block=added_block,
        )
    except (TypeError, KeyError, ValueError) as exc:
        raise FetchFailed("Failed to fetch details") from exc


async def resolve_did_to_account(identifier: str, connection: ChainConnection) -> Optional[str]:
    return await _query(connection, "Did", "Lookup", [encode_fixed_width(identifier)])


async def resolve_account_id_to_did(account_id: str, connection: ChainConnection) -> Union[str, bool]:
    data = await _query(connection, "Did", "RLookup", [account_id])
    if data == EMPTY_DID:
        return False
    return data


async def is_did_validator(identifier: str, connection: ChainConnection) -> bool:
    identifier_hex = encode_fixed_width(identifier)
    members = await _query(connection, "ValidatorSet", "Members", [])
    for member in members or []:
        if str(member) == identifier_hex:
            return True
    return False


async def get_did_key_history(identifier: str, connection: ChainConnection) -> List[Any]:
    data = await _query(connection, "Did", "PrevKeys", [encode_fixed_width(identifier)])
    return list(data or [])
