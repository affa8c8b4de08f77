import os
from dataclasses import dataclass
from typing import Any

from dotenv import load_dotenv

from styngr.errors import ConfigurationError

DEFAULT_API_SERVER = "https://stg.api.styngr.com/api"
DEFAULT_BUNDLE = "SUBSCRIPTION_RADIO_BUNDLE_FREE"
DEFAULT_BILLING_COUNTRY = "US"
DEFAULT_TIMEOUT_SECONDS = 20.0


@dataclass
class Configuration:
    """API credentials and tunables for the Styngr integration."""

    api_key: str
    app_id: str
    api_server: str = DEFAULT_API_SERVER
    bundle: str = DEFAULT_BUNDLE
    encryption_secret: str | None = None  # Falls back to api_key
    billing_country: str = DEFAULT_BILLING_COUNTRY
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raise ConfigurationError unless every value has the right shape."""
        for name in ("api_key", "app_id", "api_server"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ConfigurationError(
                    f"Please specify a configuration and ensure all values are correct! ({name})"
                )
        if self.encryption_secret is not None and not isinstance(self.encryption_secret, str):
            raise ConfigurationError("encryption_secret must be a string")
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")

        self.api_server = self.api_server.rstrip("/")

    @property
    def secret(self) -> str:
        return self.encryption_secret or self.api_key

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Configuration":
        """Build from the camelCase mapping accepted by set_configuration."""
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a mapping")

        kwargs: dict[str, Any] = {
            "api_key": data.get("apiKey"),
            "app_id": data.get("appId"),
        }
        optional = {
            "apiServer": "api_server",
            "bundle": "bundle",
            "encryptionSecret": "encryption_secret",
            "billingCountry": "billing_country",
            "timeout": "timeout",
        }
        for key, field_name in optional.items():
            if data.get(key) is not None:
                kwargs[field_name] = data[key]
        return cls(**kwargs)

    @classmethod
    def from_env(cls) -> "Configuration":
        """Load configuration from the environment (and a .env file if present)."""
        load_dotenv()

        api_key = os.getenv("STYNGR_API_KEY")
        app_id = os.getenv("STYNGR_APP_ID")
        if not api_key or not app_id:
            raise ConfigurationError("STYNGR_API_KEY and STYNGR_APP_ID environment variables must be set")

        return cls(
            api_key=api_key,
            app_id=app_id,
            api_server=os.getenv("STYNGR_API_SERVER", DEFAULT_API_SERVER),
            bundle=os.getenv("STYNGR_BUNDLE", DEFAULT_BUNDLE),
            encryption_secret=os.getenv("STYNGR_ENCRYPTION_SECRET"),
            billing_country=os.getenv("STYNGR_BILLING_COUNTRY", DEFAULT_BILLING_COUNTRY),
            timeout=float(os.getenv("STYNGR_TIMEOUT", DEFAULT_TIMEOUT_SECONDS)),
        )
