from dataclasses import dataclass
import os

from dotenv import load_dotenv


load_dotenv()

IDENTIFIER_PREFIX = "did:ssid:"

DEFAULT_WS_URLS = {
    "local": "ws://127.0.0.1:9944",
}


@dataclass(frozen=True)
class Settings:
    app_name: str = "SSID DID Registry"
    network: str = os.getenv("SSID_NETWORK", "local")
    ss58_format: int = int(os.getenv("SSID_SS58_FORMAT", "42"))
    crypto_type: str = os.getenv("SSID_CRYPTO_TYPE", "sr25519")
    signer_uri: str = os.getenv("SSID_SIGNER_URI", "")
    validator_uri: str = os.getenv("SSID_VALIDATOR_URI", "")
    finalize_updates: bool = os.getenv("SSID_FINALIZE_UPDATES", "false").lower() == "true"
    api_key: str = os.getenv("API_KEY", "")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    def ws_url_for(self, network: str) -> str:
        url = os.getenv(f"SSID_{network.upper()}_WS_URL", DEFAULT_WS_URLS.get(network, ""))
        if not url:
            raise ValueError(f"No node url configured for network '{network}'")
        return url


settings = Settings()
