import asyncio
from dataclasses import replace
import os
import sys

from ssid.config import settings
from ssid.did_registry import DidRegistry
from ssid.errors import SsidError

identifier = sys.argv[1] if len(sys.argv) > 1 else "stanly"
mnemonic = os.getenv("DID_MNEMONIC")
if not mnemonic:
    raise RuntimeError("Missing DID_MNEMONIC in .env")

registry = DidRegistry(replace(settings, signer_uri=settings.signer_uri or "//Alice"))


async def main():
    try:
        did = await registry.generate_did(mnemonic, identifier, os.getenv("DID_METADATA", ""))
        print("DID document:", did.model_dump())
        block_hash = await registry.store_did_on_chain(did, registry.signer())
        print("Finalized block hash:", block_hash)
        print("Details:", (await registry.get_did_details(did.identity)).model_dump())
    except SsidError as exc:
        print(f"{exc.error_code}: {exc.message}")
    finally:
        await registry.close()


if __name__ == "__main__":
    asyncio.run(main())
