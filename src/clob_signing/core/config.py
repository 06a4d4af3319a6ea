"""Configuration management for CLOB signing."""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml
from dotenv import load_dotenv

from clob_signing.signing.models import ApiKeyCreds, BuilderApiKey, Chain, SignatureType


class ConfigError(Exception):
    """Raise when configuration loading or validation fails."""


@dataclass(frozen=True)
class SigningSettings:
    """Non-secret signing configuration for one wallet.

    The private key is not part of the settings; callers read it from the
    environment at signing time.

    Args:
        chain_id: Chain on which orders are signed.
        signature_type: Verification scheme recorded in orders.
        funder_address: Proxy or Safe wallet holding funds, if any.
        api_creds: Level 2 session credentials, if configured.
        builder_creds: Builder attribution credentials, if configured.

    """

    chain_id: int
    signature_type: SignatureType
    funder_address: str | None = None
    api_creds: ApiKeyCreds | None = None
    builder_creds: BuilderApiKey | None = None


_DEFAULT_CONFIG_DIR = Path(__file__).parent.parent / "config"
_SECTION = "polymarket"
_ENV_REFERENCE = re.compile(r"\$\{(?P<name>[^}:]+)(?::(?P<default>[^}]*))?\}")


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read one YAML settings file, treating a missing or empty file as ``{}``."""
    if not path.exists():
        return {}
    with path.open() as f:
        return cast("dict[str, Any]", yaml.safe_load(f) or {})


def _overlay(base: dict[str, Any], local: dict[str, Any]) -> dict[str, Any]:
    """Lay ``local`` over ``base``, merging sections key by key."""
    merged = dict(base)
    for name, section in local.items():
        current = merged.get(name)
        if isinstance(current, dict) and isinstance(section, dict):
            merged[name] = {**cast("dict[str, Any]", current), **cast("dict[str, Any]", section)}
        else:
            merged[name] = section
    return merged


def _resolve(value: Any) -> Any:
    """Replace a whole-string ``${VAR}`` or ``${VAR:default}`` with its value.

    Raises:
        ConfigError: If the variable is unset without a default, or if a
            reference is embedded inside a longer string.

    """
    if isinstance(value, dict):
        return {key: _resolve(item) for key, item in cast("dict[str, Any]", value).items()}
    if not isinstance(value, str) or "${" not in value:
        return value
    match = _ENV_REFERENCE.fullmatch(value)
    if match is None:
        msg = f"Unresolved environment variable reference in: {value}"
        raise ConfigError(msg)
    resolved = os.getenv(match["name"], match["default"])
    if resolved is None:
        msg = f"Required environment variable ${{{match['name']}}} is not set and has no default"
        raise ConfigError(msg)
    return resolved


class ConfigLoader:
    """Load signing settings from ``settings.yaml`` and the environment.

    ``settings.local.yaml`` in the same directory, when present, overrides
    individual keys of each section.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize the config loader.

        Load environment variables from a ``.env`` file (if present) and
        then read YAML configuration from the given directory.

        Args:
            config_dir: Directory containing config files. Defaults to src/clob_signing/config.

        """
        load_dotenv()
        self.config_dir = Path(config_dir) if config_dir is not None else _DEFAULT_CONFIG_DIR
        merged = _overlay(
            _read_yaml(self.config_dir / "settings.yaml"),
            _read_yaml(self.config_dir / "settings.local.yaml"),
        )
        self._config: dict[str, Any] = _resolve(merged)

    def get_polymarket_config(self) -> dict[str, Any]:
        """Get Polymarket signing configuration.

        Returns:
            Dictionary with Polymarket settings, empty when the section is absent.

        Raises:
            ConfigError: If the polymarket config value is not a dictionary.

        """
        result: Any = self._config.get(_SECTION) or {}
        if isinstance(result, dict):
            return cast("dict[str, Any]", result)
        msg = f"{_SECTION} config must be a dict, got {type(result).__name__}"
        raise ConfigError(msg)

    def get_signing_settings(self) -> SigningSettings:
        """Parse the ``polymarket`` section into typed signing settings.

        Empty strings are treated as unset.  Credentials are only returned
        when all three of key, secret and passphrase are present.

        Returns:
            Typed signing settings.

        Raises:
            ConfigError: If the chain id or signature type is invalid.

        """
        section = self.get_polymarket_config()
        try:
            chain_id = int(section.get("chain_id") or Chain.POLYGON.value)
            signature_type = SignatureType(int(section.get("signature_type") or 0))
        except ValueError as exc:
            msg = f"Invalid polymarket signing settings: {exc}"
            raise ConfigError(msg) from exc

        api_parts = (
            section.get("api_key"),
            section.get("api_secret"),
            section.get("api_passphrase"),
        )
        builder_parts = (
            section.get("builder_api_key"),
            section.get("builder_secret"),
            section.get("builder_passphrase"),
        )
        return SigningSettings(
            chain_id=chain_id,
            signature_type=signature_type,
            funder_address=section.get("funder_address") or None,
            api_creds=ApiKeyCreds(*map(str, api_parts)) if all(api_parts) else None,
            builder_creds=BuilderApiKey(*map(str, builder_parts)) if all(builder_parts) else None,
        )


_config: ConfigLoader | None = None


def get_config() -> ConfigLoader:
    """Return the global ``ConfigLoader`` singleton, creating it on first use.

    Lazy initialisation avoids side effects (file I/O, ``load_dotenv``)
    at import time and makes testing easier.

    Returns:
        The shared ``ConfigLoader`` instance.

    """
    global _config  # noqa: PLW0603
    if _config is None:
        _config = ConfigLoader()
    return _config
