from ssid.config import settings
from ssid.keyring import Keyring

keyring = Keyring(settings)

def mk(name: str):
    mnemonic = keyring.mnemonic_generate()
    keypair = keyring.keypair_from_mnemonic(mnemonic)
    print(f"{name}_MNEMONIC=\"{mnemonic}\"")
    print(f"{name}_ADDRESS={keypair.ss58_address}")
    print(f"{name}_PUBLIC_KEY=0x{keypair.public_key.hex()}")
    print()

if __name__ == "__main__":
    for n in ["ALICE", "BOB", "CHEN", "VALIDATOR"]:
        mk(n)
