from .config import Settings
from .errors import ChainServiceError


class Keyring:
    """Mnemonic and keypair operations backed by substrate-interface."""

    def __init__(self, settings: Settings) -> None:
        self.ss58_format = settings.ss58_format
        self.crypto_type = settings.crypto_type

    def _keypair_cls(self):
        try:
            from substrateinterface import Keypair
        except ImportError as exc:
            raise ChainServiceError(
                "substrate-interface is required for keyring operations"
            ) from exc
        return Keypair

    def _keypair_type(self) -> int:
        from substrateinterface import KeypairType

        try:
            return getattr(KeypairType, self.crypto_type.upper())
        except AttributeError as exc:
            raise ChainServiceError(f"Unsupported crypto type: {self.crypto_type}") from exc

    def mnemonic_generate(self, words: int = 12) -> str:
        return self._keypair_cls().generate_mnemonic(words=words)

    def mnemonic_validate(self, mnemonic: str) -> bool:
        return self._keypair_cls().validate_mnemonic(mnemonic)

    def keypair_from_mnemonic(self, mnemonic: str):
        # mnemonics are valid secret URIs, same derivation as the node's keyring
        return self.keypair_from_uri(mnemonic)

    def keypair_from_uri(self, suri: str):
        keypair_cls = self._keypair_cls()
        return keypair_cls.create_from_uri(
            suri, ss58_format=self.ss58_format, crypto_type=self._keypair_type()
        )

    def public_key_from_mnemonic(self, mnemonic: str) -> str:
        keypair = self.keypair_from_mnemonic(mnemonic)
        return f"0x{keypair.public_key.hex()}"
