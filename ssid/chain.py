"""
Chain connection for the SSID Substrate runtime.

``substrate-interface`` is synchronous and not thread-safe, so every call is
pushed to the event loop's default executor and serialized on a lock. The
extrinsic status subscription runs on its own ``SubstrateInterface`` when a
``connect`` factory is available and hands each status to the loop through an
asyncio queue.
"""

import asyncio
import functools
import json
import logging
import threading
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Protocol

from .config import Settings, settings as default_settings
from .errors import ChainServiceError
from .models import DispatchFailure, MetaError, StatusEvent, TxStatus


logger = logging.getLogger(__name__)

_STATUS_BY_KEY = {status.value.lower(): status for status in TxStatus}


class ChainConnection(Protocol):
    """What the submitter and resolver need from a chain connection."""

    async def query(self, module: str, storage_function: str, params: Optional[List[Any]] = None) -> Any:
        ...

    async def compose_call(self, module: str, function: str, params: Dict[str, Any]) -> Any:
        ...

    async def sign(self, call: Any, keypair: Any) -> Any:
        ...

    def watch_extrinsic(self, extrinsic: Any) -> AsyncIterator[StatusEvent]:
        ...

    async def submit_extrinsic(self, extrinsic: Any) -> str:
        ...

    async def find_meta_error(self, module_index: int, error_index: int) -> MetaError:
        ...

    async def close(self) -> None:
        ...


class SubstrateConnection:
    def __init__(self, substrate: Any, connect: Optional[Callable[[], Any]] = None) -> None:
        self.substrate = substrate
        self.connect = connect
        self._lock = threading.Lock()

    async def _run(self, func, *args, **kwargs) -> Any:
        def _locked() -> Any:
            with self._lock:
                return func(*args, **kwargs)

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _locked)

    async def query(self, module: str, storage_function: str, params: Optional[List[Any]] = None) -> Any:
        result = await self._run(
            self.substrate.query,
            module=module,
            storage_function=storage_function,
            params=params or [],
        )
        if result is None:
            return None
        return result.value

    async def compose_call(self, module: str, function: str, params: Dict[str, Any]) -> Any:
        return await self._run(
            self.substrate.compose_call,
            call_module=module,
            call_function=function,
            call_params=params,
        )

    async def sign(self, call: Any, keypair: Any) -> Any:
        return await self._run(self.substrate.create_signed_extrinsic, call=call, keypair=keypair)

    async def submit_extrinsic(self, extrinsic: Any) -> str:
        receipt = await self._run(
            self.substrate.submit_extrinsic, extrinsic, wait_for_inclusion=False
        )
        return receipt.extrinsic_hash

    async def watch_extrinsic(self, extrinsic: Any) -> AsyncIterator[StatusEvent]:
        loop = asyncio.get_running_loop()
        events: asyncio.Queue = asyncio.Queue()
        extrinsic_hash = f"0x{extrinsic.extrinsic_hash.hex()}"

        def watch(substrate: Any) -> Optional[StatusEvent]:
            def handler(message: Dict[str, Any], update_nr: int, subscription_id: str) -> Optional[StatusEvent]:
                if "params" not in message:
                    return None
                event = self._status_event(substrate, message["params"]["result"], extrinsic_hash)
                loop.call_soon_threadsafe(events.put_nowait, event)
                if event.is_terminal:
                    substrate.rpc_request("author_unwatchExtrinsic", [subscription_id])
                    return event
                return None

            return substrate.rpc_request(
                "author_submitAndWatchExtrinsic",
                [str(extrinsic.data)],
                result_handler=handler,
            )

        def subscribe() -> Optional[StatusEvent]:
            if self.connect is None:
                with self._lock:
                    return watch(self.substrate)
            substrate = self.connect()
            try:
                return watch(substrate)
            finally:
                substrate.close()

        watcher = loop.run_in_executor(None, subscribe)
        # None marks the end of the subscription thread
        watcher.add_done_callback(lambda _: events.put_nowait(None))
        while True:
            event = await events.get()
            if event is None:
                watcher.result()
                return
            yield event
            if event.is_terminal:
                return

    def _status_event(self, substrate: Any, result: Any, extrinsic_hash: str) -> StatusEvent:
        if isinstance(result, dict):
            key, value = next(iter(result.items()))
        else:
            key, value = result, None
        status = _STATUS_BY_KEY.get(str(key).lower())
        if status is None:
            raise ChainServiceError(f"Unknown extrinsic status: {key}")
        block_hash = value if status in (TxStatus.IN_BLOCK, TxStatus.FINALIZED) else None
        dispatch_error = None
        if block_hash:
            dispatch_error = self._dispatch_failure(substrate, extrinsic_hash, block_hash)
        return StatusEvent(
            status=status,
            block_hash=block_hash,
            extrinsic_hash=extrinsic_hash,
            dispatch_error=dispatch_error,
        )

    def _dispatch_failure(
        self, substrate: Any, extrinsic_hash: str, block_hash: str
    ) -> Optional[DispatchFailure]:
        from substrateinterface import ExtrinsicReceipt

        receipt = ExtrinsicReceipt(
            substrate=substrate, extrinsic_hash=extrinsic_hash, block_hash=block_hash
        )
        for event in receipt.triggered_events:
            value = event.value
            if value["module_id"] == "System" and value["event_id"] == "ExtrinsicFailed":
                return parse_dispatch_error(value["attributes"])
        return None

    async def find_meta_error(self, module_index: int, error_index: int) -> MetaError:
        def _find() -> MetaError:
            metadata = self.substrate.metadata
            error = metadata.get_module_error(module_index=module_index, error_index=error_index)
            section = next(
                (pallet.value["name"] for pallet in metadata.pallets if pallet.value["index"] == module_index),
                str(module_index),
            )
            return MetaError(section=section, name=error.name, documentation=list(error.docs or []))

        return await self._run(_find)

    async def close(self) -> None:
        await self._run(self.substrate.close)


def parse_dispatch_error(attributes: Any) -> DispatchFailure:
    if isinstance(attributes, dict) and "dispatch_error" in attributes:
        dispatch_error = attributes["dispatch_error"]
    elif isinstance(attributes, (list, tuple)):
        dispatch_error = attributes[0]
    else:
        dispatch_error = attributes

    if isinstance(dispatch_error, dict) and "Module" in dispatch_error:
        module = dispatch_error["Module"]
        if isinstance(module, (list, tuple)):
            module_index, error_index = module
        else:
            module_index, error_index = module["index"], module["error"]
        if isinstance(error_index, str):
            # newer runtimes encode the error as a [u8; 4] whose first byte is the index
            error_index = bytes.fromhex(error_index[2:])[0]
        return DispatchFailure(is_module=True, module_index=module_index, error_index=error_index)

    if isinstance(dispatch_error, str):
        description = dispatch_error
    else:
        description = json.dumps(dispatch_error, sort_keys=True)
    return DispatchFailure(is_module=False, description=description)


async def build_connection(network: str, settings: Settings = default_settings) -> SubstrateConnection:
    try:
        url = settings.ws_url_for(network)
    except ValueError as exc:
        raise ChainServiceError(str(exc)) from exc
    try:
        from substrateinterface import SubstrateInterface
    except ImportError as exc:
        raise ChainServiceError(
            "substrate-interface is required to connect to the chain"
        ) from exc

    connect = functools.partial(SubstrateInterface, url=url, ss58_format=settings.ss58_format)

    loop = asyncio.get_running_loop()
    try:
        substrate = await loop.run_in_executor(None, connect)
    except Exception as exc:
        logger.error(f"Failed to connect to {network} network at {url}: {exc}")
        raise ChainServiceError(f"Failed to connect to {network} network") from exc
    logger.info(f"Connected to {network} network at {url}")
    return SubstrateConnection(substrate, connect)
