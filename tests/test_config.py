"""
tests/test_config.py

LedgerConfig loading: defaults, YAML, environment, explicit overrides,
and open_ledger wiring.
"""

import pytest

from conftest import make_fields
from txnledger.config import LedgerConfig, build_store, env_overrides, load_config, open_ledger
from txnledger.core.crypto import Ed25519KeyManager
from txnledger.core.exceptions import ConfigError
from txnledger.storage import JsonlStore, MemoryStore


class TestLoadConfig:

    def test_defaults(self):
        config = load_config(environ={})
        assert config == LedgerConfig()
        assert config.collection == "TRANSACTIONS"
        assert config.storage == "jsonl"
        assert config.fsync is True

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "ledger.yaml"
        path.write_text(
            "storage: memory\n"
            "collection: PAYMENTS\n"
            "fsync: no\n"
            "lock_timeout: 2\n"
        )
        config = load_config(path=path, environ={})
        assert config.storage == "memory"
        assert config.collection == "PAYMENTS"
        assert config.fsync is False
        assert config.lock_timeout == 2

    def test_empty_yaml_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path=path, environ={}) == LedgerConfig()

    def test_precedence_yaml_env_explicit(self, tmp_path):
        path = tmp_path / "ledger.yaml"
        path.write_text("data_dir: from-yaml\ncollection: FROM_YAML\n")
        environ = {"TXNLEDGER_DATA_DIR": "from-env", "TXNLEDGER_FSYNC": "false"}

        config = load_config(path=path, environ=environ, data_dir="explicit")
        assert config.data_dir == "explicit"
        assert config.collection == "FROM_YAML"
        assert config.fsync is False

    def test_none_override_means_not_given(self):
        config = load_config(environ={"TXNLEDGER_STORAGE": "memory"}, storage=None)
        assert config.storage == "memory"

    def test_env_parsing(self):
        overrides = env_overrides({
            "TXNLEDGER_LOCK_TIMEOUT": "0.5",
            "TXNLEDGER_VERIFY_ON_OPEN": "off",
            "TXNLEDGER_SIGNING_KEY": "/keys/op.pem",
            "UNRELATED": "x",
        })
        assert overrides == {
            "lock_timeout": 0.5,
            "verify_on_open": False,
            "signing_key": "/keys/op.pem",
        }

    def test_log_level_name_case_insensitive(self):
        assert load_config(environ={"TXNLEDGER_LOG_LEVEL": "debug"}).log_level == "debug"


class TestConfigErrors:

    @pytest.mark.parametrize("environ", [
        {"TXNLEDGER_FSYNC": "maybe"},
        {"TXNLEDGER_LOCK_TIMEOUT": "soon"},
        {"TXNLEDGER_LOCK_TIMEOUT": "0"},
        {"TXNLEDGER_STORAGE": "postgres"},
        {"TXNLEDGER_COLLECTION": "../escape"},
        {"TXNLEDGER_LOG_LEVEL": "bogus"},
    ])
    def test_bad_env_values(self, environ):
        with pytest.raises(ConfigError):
            load_config(environ=environ)

    def test_unknown_log_level_named(self):
        with pytest.raises(ConfigError, match="log_level"):
            load_config(environ={}, log_level="LOUD")

    def test_unknown_yaml_key(self, tmp_path):
        path = tmp_path / "ledger.yaml"
        path.write_text("storage: jsonl\nreplicas: 3\n")
        with pytest.raises(ConfigError, match="replicas"):
            load_config(path=path, environ={})

    def test_yaml_not_a_mapping(self, tmp_path):
        path = tmp_path / "ledger.yaml"
        path.write_text("- jsonl\n- memory\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path=path, environ={})

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "ledger.yaml"
        path.write_text("storage: [jsonl\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path=path, environ={})

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(path=tmp_path / "nope.yaml", environ={})

    def test_missing_signing_key(self, tmp_path):
        config = LedgerConfig(data_dir=str(tmp_path), signing_key=str(tmp_path / "none.pem"))
        with pytest.raises(ConfigError, match="signing key"):
            build_store(config)


class TestOpenLedger:

    def test_memory_backend(self):
        ledger = open_ledger(LedgerConfig(storage="memory"))
        assert isinstance(ledger.store, MemoryStore)

    def test_jsonl_backend_with_signing_key(self, tmp_path):
        key_path = tmp_path / "op.pem"
        key = Ed25519KeyManager.generate()
        key.save(key_path)

        config = LedgerConfig(
            data_dir=    str(tmp_path / "data"),
            collection=  "PAYMENTS",
            fsync=       False,
            signing_key= str(key_path),
            lock_timeout= 1.5,
        )
        ledger = open_ledger(config)
        assert isinstance(ledger.store, JsonlStore)
        assert ledger.store.path == tmp_path / "data" / "PAYMENTS.jsonl"
        assert ledger.lock_timeout == 1.5

        ledger.append(**make_fields())
        report = ledger.verify()
        assert report.signed_entries == 1
        assert report
