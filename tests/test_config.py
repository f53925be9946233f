"""
Configuration tests.
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from leaselocker.config import Environment, Settings
from leaselocker.stores import LeaseTableConfig


def test_defaults():
    config = Settings(_env_file=None)

    assert config.env == Environment.DEVELOPMENT
    assert config.lease_duration == timedelta(seconds=30)
    assert config.heartbeat_interval_seconds < config.lease_duration_seconds

    table = LeaseTableConfig.from_settings(config)
    assert table.table_name == "leases"
    assert table.key_column == "lease_id"
    assert table.expiry_column == "lease_until"


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("LEASELOCKER_LEASE_TABLE_NAME", "mongo_shards")
    monkeypatch.setenv("LEASELOCKER_LEASE_KEY_COLUMN", "ShardID")
    monkeypatch.setenv("LEASELOCKER_DATABASE_URL", "sqlite+aiosqlite:///leases.db")
    monkeypatch.setenv("LEASELOCKER_LESSEE_ID", "worker-7")

    config = Settings(_env_file=None)

    assert config.lessee_id == "worker-7"
    assert config.database_url == "sqlite+aiosqlite:///leases.db"
    assert LeaseTableConfig.from_settings(config).table_name == "mongo_shards"
    assert LeaseTableConfig.from_settings(config).key_column == "ShardID"


def test_rejects_sync_database_url():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, database_url="postgresql://localhost/leases")


@pytest.mark.parametrize("name", ["leases; DROP TABLE x", "1leases", "lease-table", ""])
def test_rejects_bad_identifiers(name):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, lease_table_name=name)


@pytest.mark.parametrize(
    "field", ["lease_duration_seconds", "heartbeat_interval_seconds", "poll_interval_seconds"]
)
def test_rejects_non_positive_timing(field):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: 0})


def test_settings_module_is_independent_of_stores():
    from leaselocker import config as config_module

    assert not hasattr(config_module, "LeaseTableConfig")
    assert not hasattr(config_module.Settings, "lease_table_config")
