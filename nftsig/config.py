"""Configuration management with Pydantic and XDG base directory support."""

import logging
import os
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, PrivateAttr, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from nftsig.utils.crypto import (
    decrypt_blob,
    encrypt_blob,
    load_or_create_fernet_key,
    load_or_create_hmac_key,
    write_secure_file,
)

logger = logging.getLogger(__name__)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def get_xdg_data_home() -> Path:
    """Get XDG_DATA_HOME directory, defaulting to ~/.local/share."""
    xdg_data = os.getenv("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_xdg_config_home() -> Path:
    """Get XDG_CONFIG_HOME directory, defaulting to ~/.config."""
    xdg_config = os.getenv("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


class Settings(BaseSettings):
    """nftsig configuration settings.

    Precedence: CLI flag > environment variable > .env file > defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="NFTSIG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Online mode control
    online: bool = Field(
        default=False,
        description="Enable online features (JSON-RPC calls to a node)",
    )

    # Data directories
    data_dir: Path | None = Field(
        default=None,
        description="Override data directory (defaults to XDG_DATA_HOME/nftsig)",
    )

    config_dir: Path | None = Field(
        default=None,
        description="Override config directory (defaults to XDG_CONFIG_HOME/nftsig)",
    )

    # Remote validation
    rpc_url: str | None = Field(
        default=None,
        description="Ethereum JSON-RPC endpoint used by `remote verify`",
    )

    contract_address: str | None = Field(
        default=None,
        description="Address of the NFT contract implementing isValidSignature",
    )

    rpc_timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        description="HTTP timeout for JSON-RPC requests (seconds)",
    )

    rpc_failure_threshold: int = Field(
        default=3,
        ge=1,
        description="Consecutive RPC failures before the circuit breaker opens",
    )

    rpc_block: str = Field(
        default="latest",
        description="Block tag or number passed to eth_call",
    )

    # Consent policy
    consent_namespace: str = Field(
        default="nftsig",
        min_length=1,
        description="Namespace bound into off-chain consent signatures",
    )

    revoke_consent_on_transfer: bool = Field(
        default=False,
        description="Drop every consent recorded for a token when it changes owner",
    )

    # Audit settings
    audit_enabled: bool = Field(
        default=True,
        description="Enable append-only audit ledger",
    )

    audit_hmac_key_path: Path | None = Field(
        default=None,
        description="Location of the audit ledger HMAC key for tamper detection",
    )

    # Signing key
    signer_private_key: SecretStr | None = Field(
        default=None,
        description="Owner private key used by `consent sign` (persisted encrypted)",
    )

    signer_key_path: Path | None = Field(
        default=None,
        description="Location of the Fernet key sealing the stored signer key",
    )

    log_level: LogLevel = Field(
        default="WARNING",
        description="Root log level for the CLI",
    )

    _signer_key_cache: str | None = PrivateAttr(default=None)

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    def model_post_init(self, __context: Any) -> None:
        """Persist an inline signer key into the encrypted store."""
        super().model_post_init(__context)
        if self.signer_private_key is not None:
            self.store_signer_key(self.signer_private_key.get_secret_value())
            # Prevent accidental plaintext reuse once persisted.
            object.__setattr__(self, "signer_private_key", None)

    def get_data_dir(self) -> Path:
        """Get the data directory, creating if necessary."""
        data_dir = self.data_dir if self.data_dir else get_xdg_data_home() / "nftsig"
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_config_dir(self) -> Path:
        """Get the config directory, creating if necessary."""
        config_dir = self.config_dir if self.config_dir else get_xdg_config_home() / "nftsig"
        config_dir.mkdir(parents=True, exist_ok=True)
        return config_dir

    def get_registry_path(self) -> Path:
        """Get path to the token ownership registry."""
        return self.get_data_dir() / "tokens.json"

    def get_consent_path(self) -> Path:
        """Get path to the consent store."""
        return self.get_data_dir() / "consents.json"

    def get_audit_path(self) -> Path:
        """Get path to audit ledger file."""
        return self.get_data_dir() / "audit.jsonl"

    def get_audit_hmac_key(self) -> bytes:
        """Return the HMAC key used to seal audit ledger entries."""
        key_path = (
            self.audit_hmac_key_path
            if self.audit_hmac_key_path is not None
            else self.get_config_dir() / "audit-ledger.key"
        )
        return load_or_create_hmac_key(key_path, length=32)

    def _get_signer_store_key(self) -> bytes:
        key_path = (
            self.signer_key_path
            if self.signer_key_path is not None
            else self.get_config_dir() / "signer-store.key"
        )
        return load_or_create_fernet_key(key_path)

    def _get_signer_secret_path(self) -> Path:
        return self.get_config_dir() / "secrets" / "signer.enc"

    def store_signer_key(self, private_key: str) -> None:
        """Persist ``private_key`` using at-rest encryption."""
        token = encrypt_blob(private_key.encode("utf-8"), key=self._get_signer_store_key())
        write_secure_file(self._get_signer_secret_path(), token)
        self._signer_key_cache = private_key
        logger.info("Stored signer key at %s", self._get_signer_secret_path())

    def get_signer_key(self) -> str | None:
        """Retrieve the signer private key from the encrypted store."""
        if self._signer_key_cache is not None:
            return self._signer_key_cache

        path = self._get_signer_secret_path()
        if not path.exists():
            return None

        try:
            secret = decrypt_blob(path.read_bytes(), key=self._get_signer_store_key()).decode(
                "utf-8"
            )
        except Exception as exc:  # noqa: BLE001 - any failure leaves storage unreadable
            raise RuntimeError("Failed to load stored signer key.") from exc

        self._signer_key_cache = secret
        return secret


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance (useful for testing)."""
    global _settings
    _settings = settings
