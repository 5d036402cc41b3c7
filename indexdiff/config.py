"""Configuration management for indexdiff."""

from __future__ import annotations

import json
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigError
from .text import Messages

DEFAULT_CONFIG_FILE = Path("indexdiff.json")
CONFIG_ENV = "INDEXDIFF_CONFIG"
DEFAULT_SOURCE = "mesos"
DEFAULT_TARGET = "kubernetes"
DEFAULT_CACHE_DIR = Path("dist")
DEFAULT_PAGE_SIZE = 1000
DEFAULT_MIN_ARTIFACT_BYTES = 100
DEFAULT_TEMP_SUFFIX = "_tmp"
DEFAULT_STALE_DAYS = 30
APP_ID_ENV = "{prefix}_APP_ID"
API_KEY_ENV = "{prefix}_API_KEY"

_ACCOUNT_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.]*$")


@dataclass(frozen=True, slots=True)
class Account:
    name: str
    app_id: str | None = None
    api_key: str | None = field(default=None, repr=False)

    @property
    def has_credentials(self) -> bool:
        return bool(self.app_id and self.api_key)


@dataclass
class AccountCredentials:
    app_id: str | None = None
    api_key: str | None = None


@dataclass
class Config:
    source: str = DEFAULT_SOURCE
    target: str = DEFAULT_TARGET
    cache_dir: Path = DEFAULT_CACHE_DIR
    page_size: int = DEFAULT_PAGE_SIZE
    min_artifact_bytes: int = DEFAULT_MIN_ARTIFACT_BYTES
    temp_suffix: str = DEFAULT_TEMP_SUFFIX
    stale_days: int = DEFAULT_STALE_DAYS
    credentials: dict[str, AccountCredentials] = field(default_factory=dict)

    @property
    def account_names(self) -> tuple[str, str]:
        return (self.source, self.target)


def account_env_names(name: str) -> tuple[str, str]:
    """Return the (app id, API key) environment variable names for *name*."""

    prefix = re.sub(r"[^A-Za-z0-9]", "_", name).upper()
    return APP_ID_ENV.format(prefix=prefix), API_KEY_ENV.format(prefix=prefix)


def resolve_account(config: Config, name: str) -> Account:
    """Return the account *name* with credentials from config or environment."""

    if name not in config.account_names:
        raise ConfigError(
            Messages.ERROR_ACCOUNT_UNKNOWN.format(
                account=name,
                allowed=", ".join(config.account_names),
            )
        )
    configured = config.credentials.get(name) or AccountCredentials()
    app_env, key_env = account_env_names(name)
    return Account(
        name=name,
        app_id=configured.app_id or os.getenv(app_env) or None,
        api_key=configured.api_key or os.getenv(key_env) or None,
    )


def resolve_accounts(config: Config) -> tuple[Account, ...]:
    return tuple(resolve_account(config, name) for name in config.account_names)


def require_credentials(account: Account) -> Account:
    if account.has_credentials:
        return account
    app_env, key_env = account_env_names(account.name)
    raise ConfigError(
        Messages.ERROR_CREDENTIALS_MISSING.format(
            account=account.name,
            app_env=app_env,
            key_env=key_env,
        )
    )


def resolve_config_file(path: Path | str | None = None) -> Path:
    if path is not None:
        return Path(path).expanduser()
    override = os.getenv(CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    return DEFAULT_CONFIG_FILE


def load_config(path: Path | str | None = None) -> Config:
    """Load `.env` credentials and the optional JSON config file."""

    load_dotenv()
    config_file = resolve_config_file(path)
    if not config_file.exists():
        return Config()
    try:
        raw = json.loads(config_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(
            Messages.ERROR_CONFIG_FILE_INVALID.format(path=config_file, reason=exc)
        ) from exc
    return config_from_json(raw)


def config_from_json(
    payload: str | Mapping[str, object], *, base: Config | None = None
) -> Config:
    """Return a Config from a JSON string or mapping without saving it."""
    data = _coerce_config_payload(payload)
    config = Config() if base is None else _clone_config(base)
    _apply_config_payload(config, data)
    if config.source == config.target:
        raise ConfigError(Messages.ERROR_ACCOUNTS_IDENTICAL.format(account=config.source))
    return config


def _coerce_config_payload(payload: str | Mapping[str, object]) -> Mapping[str, object]:
    if isinstance(payload, str):
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ConfigError(Messages.ERROR_CONFIG_JSON_INVALID) from exc
    elif isinstance(payload, Mapping):
        data = dict(payload)
    else:
        raise ConfigError(Messages.ERROR_CONFIG_JSON_INVALID)
    if not isinstance(data, Mapping):
        raise ConfigError(Messages.ERROR_CONFIG_JSON_INVALID)
    return data


def _clone_config(config: Config) -> Config:
    return Config(
        source=config.source,
        target=config.target,
        cache_dir=config.cache_dir,
        page_size=config.page_size,
        min_artifact_bytes=config.min_artifact_bytes,
        temp_suffix=config.temp_suffix,
        stale_days=config.stale_days,
        credentials={
            name: AccountCredentials(app_id=creds.app_id, api_key=creds.api_key)
            for name, creds in config.credentials.items()
        },
    )


def _apply_config_payload(config: Config, payload: Mapping[str, object]) -> None:
    if "source" in payload:
        config.source = _coerce_account_name(payload["source"], "source", DEFAULT_SOURCE)
    if "target" in payload:
        config.target = _coerce_account_name(payload["target"], "target", DEFAULT_TARGET)
    if "cache_dir" in payload:
        cache_dir = _coerce_optional_str(payload["cache_dir"], "cache_dir")
        config.cache_dir = Path(cache_dir).expanduser() if cache_dir else DEFAULT_CACHE_DIR
    if "page_size" in payload:
        config.page_size = _coerce_positive_int(
            payload["page_size"], "page_size", DEFAULT_PAGE_SIZE
        )
    if "min_artifact_bytes" in payload:
        config.min_artifact_bytes = _coerce_int(
            payload["min_artifact_bytes"], "min_artifact_bytes", DEFAULT_MIN_ARTIFACT_BYTES
        )
    if "temp_suffix" in payload:
        config.temp_suffix = _coerce_required_str(
            payload["temp_suffix"], "temp_suffix", DEFAULT_TEMP_SUFFIX
        )
    if "stale_days" in payload:
        config.stale_days = _coerce_positive_int(
            payload["stale_days"], "stale_days", DEFAULT_STALE_DAYS
        )
    if "accounts" in payload:
        config.credentials.update(_coerce_credentials(payload["accounts"]))


def _coerce_credentials(value: object) -> dict[str, AccountCredentials]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field="accounts"))
    result: dict[str, AccountCredentials] = {}
    for name, raw in value.items():
        field_name = f"accounts.{name}"
        if not isinstance(raw, Mapping):
            raise ConfigError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field_name))
        result[str(name)] = AccountCredentials(
            app_id=_coerce_optional_str(raw.get("app_id"), f"{field_name}.app_id"),
            api_key=_coerce_optional_str(raw.get("api_key"), f"{field_name}.api_key"),
        )
    return result


def _coerce_account_name(value: object, field: str, default: str) -> str:
    name = _coerce_required_str(value, field, default)
    if not _ACCOUNT_NAME_RE.match(name):
        raise ConfigError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
    return name


def _coerce_optional_str(value: object, field: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        cleaned = value.strip()
        return cleaned or None
    raise ConfigError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_required_str(value: object, field: str, default: str) -> str:
    if value is None:
        return default
    if isinstance(value, str):
        cleaned = value.strip()
        return cleaned or default
    raise ConfigError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_int(value: object, field: str, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ConfigError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return default
        try:
            return int(cleaned)
        except ValueError as exc:
            raise ConfigError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field)) from exc
    raise ConfigError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_positive_int(value: object, field: str, default: int) -> int:
    number = _coerce_int(value, field, default)
    if number <= 0:
        raise ConfigError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
    return number
