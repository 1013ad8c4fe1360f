"""Logging setup and the context ledger operations attach to records."""

from __future__ import annotations

import json
import logging

import pytest

from membership.core.errors import AlreadyEnrolled, TransferNotAllowed
from membership.core.logging import _ContainerFormatter, _JsonFormatter, setup_logging
from membership.services.ledger import MembershipLedger

LEDGER_LOGGER = "membership.services.ledger"


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    saved = (root.level, list(root.handlers))
    yield
    root.setLevel(saved[0])
    root.handlers[:] = saved[1]


# ---- setup_logging ----


@pytest.mark.parametrize(
    "level_name,root_level,library_level",
    [
        ("debug", logging.DEBUG, logging.WARNING),
        ("INFO", logging.INFO, logging.WARNING),
        ("error", logging.ERROR, logging.ERROR),
        ("chatty", logging.INFO, logging.WARNING),
    ],
)
def test_setup_logging_levels(
    restore_root_logging, level_name: str, root_level: int, library_level: int
) -> None:
    setup_logging(level_name)
    assert logging.getLogger().level == root_level
    for name in ("uvicorn", "httpx"):
        assert logging.getLogger(name).level == library_level


@pytest.mark.parametrize(
    "json_format,formatter", [(False, _ContainerFormatter), (True, _JsonFormatter)]
)
def test_setup_logging_installs_one_stdout_handler(
    restore_root_logging, json_format: bool, formatter: type
) -> None:
    setup_logging("info")
    setup_logging("info", json_format=json_format)
    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0].formatter, formatter)


# ---- ledger records ----


def _ledger_records(caplog: pytest.LogCaptureFixture) -> list[logging.LogRecord]:
    return [r for r in caplog.records if r.name == LEDGER_LOGGER]


def test_issue_record_carries_holder_and_credential(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger=LEDGER_LOGGER)
    MembershipLedger().issue("alice", 1000, now=0)

    (record,) = _ledger_records(caplog)
    assert record.levelno == logging.INFO
    assert record.holder == "alice"  # type: ignore[attr-defined]
    assert record.credential_id == 1  # type: ignore[attr-defined]

    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["holder"] == "alice"
    assert parsed["credential_id"] == 1
    assert parsed["message"] == "Issued credential id=1 holder=alice expires_at=1000"


def test_rejected_issue_logs_warning_with_location(
    caplog: pytest.LogCaptureFixture,
) -> None:
    ledger = MembershipLedger()
    ledger.issue("alice", 1000, now=0)
    caplog.set_level(logging.INFO, logger=LEDGER_LOGGER)
    caplog.clear()

    with pytest.raises(AlreadyEnrolled):
        ledger.issue("alice", 1000, now=5)

    (record,) = _ledger_records(caplog)
    assert record.levelno == logging.WARNING
    assert record.credential_id == 1  # type: ignore[attr-defined]
    assert "[ledger.py:" in _ContainerFormatter().format(record)


def test_rejected_transfer_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger=LEDGER_LOGGER)
    with pytest.raises(TransferNotAllowed):
        MembershipLedger().transfer(7, "bob")

    (record,) = _ledger_records(caplog)
    assert record.levelno == logging.WARNING
    assert record.credential_id == 7  # type: ignore[attr-defined]
    assert not hasattr(record, "holder")
