"""Tests for relay.settings, BrokerConfig and the bootstrap helpers."""

import asyncio
import logging
import logging.handlers
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from relay.events import BrokerConfig, EventBroker
from relay.logging_config import setup_logging
from relay.runner import build_broker, run_broker
from relay.settings import get_setting, load_settings, reload_settings


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    reload_settings()
    yield
    reload_settings()


def test_defaults_when_file_missing(tmp_path: Path) -> None:
    settings = load_settings(config_dir=tmp_path)
    assert get_setting(settings, "broker.retention_window") == 120
    assert get_setting(settings, "broker.sweep_interval") == 10
    assert get_setting(settings, "broker.poll_timeout") == 30


def test_file_values_merge_over_defaults(tmp_path: Path) -> None:
    (tmp_path / "settings.yaml").write_text(yaml.safe_dump({"broker": {"poll_timeout": 5}}))
    settings = load_settings(config_dir=tmp_path)
    assert get_setting(settings, "broker.poll_timeout") == 5
    assert get_setting(settings, "broker.retention_window") == 120


def test_broken_yaml_falls_back_to_defaults(tmp_path: Path) -> None:
    (tmp_path / "settings.yaml").write_text("broker: [unclosed")
    settings = load_settings(config_dir=tmp_path)
    assert get_setting(settings, "broker.poll_timeout") == 30


def test_get_setting_missing_path_returns_default() -> None:
    assert get_setting({"a": {"b": 1}}, "a.c", default="x") == "x"


def test_broker_config_from_settings() -> None:
    config = BrokerConfig.from_settings({"broker": {"poll_timeout": 2.5}})
    assert config.poll_timeout == 2.5
    assert config.retention_window == 120
    assert config.sweep_interval == 10


def test_broker_config_rejects_non_positive() -> None:
    with pytest.raises(ValidationError):
        BrokerConfig(poll_timeout=0)


def test_build_broker_uses_settings() -> None:
    broker = build_broker({"broker": {"retention_window": 60, "poll_timeout": 1}})
    assert broker.store.retention_window == 60
    assert broker.waiters.timeout == 1


@pytest.fixture
def _restore_root_logger():
    root = logging.getLogger()
    level = root.level
    events_level = logging.getLogger("relay.events").level
    yield root
    logging.getLogger("relay.events").setLevel(events_level)
    for h in root.handlers[:]:
        if type(h) in (logging.StreamHandler, logging.handlers.RotatingFileHandler):
            h.close()
            root.removeHandler(h)
    root.setLevel(level)


def test_setup_logging_console_only(tmp_path: Path, _restore_root_logger) -> None:
    setup_logging(tmp_path, {"logging": {"file": "", "level": "debug"}})
    root = _restore_root_logger
    assert root.level == logging.DEBUG
    assert [type(h) for h in root.handlers] == [logging.StreamHandler]
    assert not (tmp_path / "logs").exists()


def test_setup_logging_file_handler(tmp_path: Path, _restore_root_logger) -> None:
    setup_logging(tmp_path, {"logging": {"file": "logs/test.log"}})
    assert (tmp_path / "logs").is_dir()
    assert len(_restore_root_logger.handlers) == 1
    assert isinstance(_restore_root_logger.handlers[0], logging.handlers.RotatingFileHandler)


def test_setup_logging_file_and_console(tmp_path: Path, _restore_root_logger) -> None:
    setup_logging(tmp_path, {"logging": {"file": "logs/test.log", "log_to_console": True}})
    assert [type(h) for h in _restore_root_logger.handlers] == [
        logging.handlers.RotatingFileHandler,
        logging.StreamHandler,
    ]


def test_setup_logging_broker_logger_level(tmp_path: Path, _restore_root_logger) -> None:
    setup_logging(
        tmp_path,
        {"logging": {"file": "", "level": "WARNING", "loggers": {"relay.events": "debug"}}},
    )
    assert _restore_root_logger.level == logging.WARNING
    assert logging.getLogger("relay.events").level == logging.DEBUG
    assert logging.getLogger("relay.events.broker").isEnabledFor(logging.DEBUG)


def test_default_settings_set_broker_logger_level(tmp_path: Path) -> None:
    settings = load_settings(config_dir=tmp_path)
    assert get_setting(settings, "logging.loggers") == {"relay.events": "INFO"}


@pytest.mark.asyncio
async def test_run_broker_until_shutdown() -> None:
    shutdown = asyncio.Event()
    ready: list[EventBroker] = []
    task = asyncio.create_task(
        run_broker(shutdown, settings={"broker": {"poll_timeout": 5}}, on_ready=ready.append)
    )
    await asyncio.sleep(0.01)
    assert len(ready) == 1
    broker = ready[0]
    assert broker.sweeper.running

    pending = asyncio.create_task(broker.blocking_get("k", "g1"))
    await asyncio.sleep(0.01)
    shutdown.set()
    await asyncio.wait_for(task, timeout=1.0)
    assert await pending == []
    assert not broker.sweeper.running


def test_config_dir_from_environment(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "settings.yaml").write_text(yaml.safe_dump({"broker": {"sweep_interval": 3}}))
    monkeypatch.setenv("RELAY_CONFIG_DIR", str(tmp_path))
    settings = load_settings()
    assert get_setting(settings, "broker.sweep_interval") == 3
