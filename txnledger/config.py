"""
txnledger/config.py

Ledger configuration.

Precedence, lowest to highest:
    defaults → YAML file → TXNLEDGER_* environment variables → explicit overrides

YAML example:

    storage: jsonl
    data_dir: /var/lib/txnledger
    collection: TRANSACTIONS
    fsync: true
    lock_timeout: 5.0
    verify_on_open: true
    signing_key: /etc/txnledger/operator.pem
    log_level: INFO

open_ledger() is the single place a Ledger and its store are built from
configuration. Callers hold the returned instance and pass it on.
"""

import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from txnledger.core.crypto import Ed25519KeyManager
from txnledger.core.exceptions import ConfigError
from txnledger.core.logging_setup import get_logger, parse_level
from txnledger.ledger import DEFAULT_LOCK_TIMEOUT, Ledger
from txnledger.storage import DEFAULT_COLLECTION, JsonlStore, MemoryStore, RecordStore


logger = get_logger(__name__)

ENV_PREFIX = "TXNLEDGER_"

STORAGE_BACKENDS = ("jsonl", "memory")

_TRUE  = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class LedgerConfig:
    storage:        str             = "jsonl"
    data_dir:       str             = ".txnledger"
    collection:     str             = DEFAULT_COLLECTION
    fsync:          bool            = True
    lock_timeout:   float           = DEFAULT_LOCK_TIMEOUT
    verify_on_open: bool            = True
    signing_key:    Optional[str]   = None
    log_level:      str             = "INFO"

    def validate(self) -> "LedgerConfig":
        """Return self, or raise ConfigError naming the first bad value."""
        if self.storage not in STORAGE_BACKENDS:
            raise ConfigError(
                f"storage must be one of {list(STORAGE_BACKENDS)}, got {self.storage!r}"
            )
        if not isinstance(self.collection, str) or not self.collection:
            raise ConfigError("collection must be a non-empty string")
        if any(sep in self.collection for sep in ("/", "\\")) or self.collection in (".", ".."):
            raise ConfigError(
                f"collection must be a plain name, got {self.collection!r}"
            )
        if not isinstance(self.data_dir, str) or not self.data_dir:
            raise ConfigError("data_dir must be a non-empty string")
        for name in ("fsync", "verify_on_open"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be a boolean")
        if (
            isinstance(self.lock_timeout, bool)
            or not isinstance(self.lock_timeout, (int, float))
            or self.lock_timeout <= 0
        ):
            raise ConfigError(
                f"lock_timeout must be a positive number of seconds, got {self.lock_timeout!r}"
            )
        if self.signing_key is not None and not isinstance(self.signing_key, str):
            raise ConfigError("signing_key must be a path string")
        try:
            parse_level(self.log_level)
        except ValueError as exc:
            raise ConfigError(f"log_level: {exc}") from exc
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_FIELD_NAMES = {f.name for f in fields(LedgerConfig)}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{ENV_PREFIX}{name.upper()} must be a boolean, got {raw!r}")


def _from_env_value(name: str, raw: str) -> Any:
    if name in ("fsync", "verify_on_open"):
        return _parse_bool(name, raw)
    if name == "lock_timeout":
        try:
            return float(raw)
        except ValueError:
            raise ConfigError(
                f"{ENV_PREFIX}LOCK_TIMEOUT must be a number, got {raw!r}"
            )
    return raw


def load_yaml(path: Path) -> Dict[str, Any]:
    """Read a YAML mapping of config keys. Unknown keys are an error."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}")
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    unknown = sorted(set(data) - _FIELD_NAMES)
    if unknown:
        raise ConfigError(
            f"Unknown config keys in {path}", {"unknown": ",".join(unknown)}
        )
    return data


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Collect TXNLEDGER_<FIELD> values from the environment."""
    environ = os.environ if environ is None else environ
    overrides: Dict[str, Any] = {}
    for name in _FIELD_NAMES:
        raw = environ.get(ENV_PREFIX + name.upper())
        if raw is not None and raw != "":
            overrides[name] = _from_env_value(name, raw)
    return overrides


def load_config(
    path:      Optional[Path] = None,
    environ:   Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> LedgerConfig:
    """
    Build a validated LedgerConfig.

    Args:
        path:      Optional YAML file.
        environ:   Environment mapping (defaults to os.environ).
        overrides: Explicit values; None means "not given".
    """
    config = LedgerConfig()
    if path is not None:
        config = replace(config, **load_yaml(path))
    config = replace(config, **env_overrides(environ))
    explicit = {k: v for k, v in overrides.items() if v is not None}
    unknown  = sorted(set(explicit) - _FIELD_NAMES)
    if unknown:
        raise ConfigError("Unknown config overrides", {"unknown": ",".join(unknown)})
    config = replace(config, **explicit)
    return config.validate()


def build_store(config: LedgerConfig) -> RecordStore:
    """Construct the RecordStore named by config.storage."""
    if config.storage == "memory":
        return MemoryStore(collection=config.collection)

    signing_key = None
    if config.signing_key:
        try:
            signing_key = Ed25519KeyManager.from_file(Path(config.signing_key))
        except (FileNotFoundError, ValueError) as exc:
            raise ConfigError(f"Cannot load signing key: {exc}") from exc

    return JsonlStore(
        data_dir=       config.data_dir,
        collection=     config.collection,
        fsync=          config.fsync,
        signing_key=    signing_key,
        verify_on_open= config.verify_on_open,
    )


def open_ledger(config: Optional[LedgerConfig] = None) -> Ledger:
    """Build the store and the Ledger over it."""
    config = (config or LedgerConfig()).validate()
    logger.info(
        "opening ledger storage=%s data_dir=%s collection=%s",
        config.storage, config.data_dir, config.collection,
    )
    return Ledger(build_store(config), lock_timeout=config.lock_timeout)
