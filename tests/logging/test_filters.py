import logging

from officeql.__version__ import __version__
from officeql.logging.filters import (
    ContextFilter,
    clear_request_context,
    set_logging_context,
    set_request_context,
)


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="sample",
        args=(),
        exc_info=None,
    )


def test_context_filter_respects_static_environment():
    set_logging_context(environment="qa", extra={"region": "eu-central"})
    try:
        record = _record()
        assert ContextFilter().filter(record)
        assert getattr(record, "environment") == "qa"
        assert getattr(record, "region") == "eu-central"
    finally:
        set_logging_context(environment=None, extra=None)


def test_context_filter_uses_request_context():
    set_request_context(request_id="req-1", entity_type="persons")
    try:
        record = _record()
        assert ContextFilter().filter(record)
        assert record.request_id == "req-1"
        assert record.entity_type == "persons"
    finally:
        clear_request_context()


def test_context_filter_stamps_package_identity():
    record = _record()
    ContextFilter().filter(record)
    assert record.sdk_name == "officeql"
    assert record.officeql_version == __version__


def test_static_extra_does_not_override_record_fields():
    set_logging_context(extra={"name": "overridden"})
    try:
        record = _record()
        ContextFilter().filter(record)
        assert record.name == "test.logger"
    finally:
        set_logging_context(environment=None, extra=None)


def test_context_filter_no_config_is_graceful():
    set_logging_context(environment=None, extra=None)
    clear_request_context()
    record = _record()
    assert ContextFilter().filter(record)
    assert not hasattr(record, "environment")
    assert record.request_id is None
