import logging

import pytest
from pydantic import ValidationError

from config import Settings, configure_logging


def test_defaults(monkeypatch) -> None:
    for key in ("PCD_DATA_KIND", "PCD_WRITE_BUFFER_SIZE", "LOG_LEVEL", "DEBUG"):
        monkeypatch.delenv(key, raising=False)
    s = Settings(_env_file=None)
    assert s.PCD_DATA_KIND == "ascii"
    assert s.PCD_WRITE_BUFFER_SIZE > 0
    assert s.LOG_LEVEL == "INFO"


def test_env_overrides_are_normalized(monkeypatch) -> None:
    monkeypatch.setenv("PCD_DATA_KIND", " Binary ")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = Settings(_env_file=None)
    assert s.PCD_DATA_KIND == "binary"
    assert s.LOG_LEVEL == "DEBUG"


@pytest.mark.parametrize(
    "key,value",
    [
        ("PCD_DATA_KIND", "binary_compressed"),
        ("PCD_WRITE_BUFFER_SIZE", "0"),
        ("LOG_LEVEL", "chatty"),
    ],
)
def test_invalid_values_fail_validation(monkeypatch, key, value) -> None:
    monkeypatch.setenv(key, value)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_configure_logging_sets_root_level(monkeypatch) -> None:
    root = logging.getLogger()
    saved_level, saved_handlers = root.level, list(root.handlers)
    for h in saved_handlers:
        root.removeHandler(h)
    try:
        configure_logging("warning")
        assert root.level == logging.WARNING
        assert root.handlers
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
