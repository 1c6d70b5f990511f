"""
tests/test_logging_setup.py

Level parsing and the single package handler.
"""

import io
import logging

import pytest

from txnledger.core.logging_setup import configure_logging, get_logger, parse_level


class TestParseLevel:

    @pytest.mark.parametrize("raw, expected", [
        ("debug", logging.DEBUG),
        (" WARNING ", logging.WARNING),
        ("10", 10),
        (logging.ERROR, logging.ERROR),
    ])
    def test_known_levels(self, raw, expected):
        assert parse_level(raw) == expected

    @pytest.mark.parametrize("raw", ["bogus", "", "WARN", None, True])
    def test_unknown_levels_raise(self, raw):
        with pytest.raises(ValueError):
            parse_level(raw)


def test_configure_twice_keeps_one_handler():
    configure_logging("WARNING", stream=io.StringIO())
    configure_logging("DEBUG", stream=io.StringIO())

    pkg = logging.getLogger("txnledger")
    streams = [h for h in pkg.handlers if isinstance(h, logging.StreamHandler)]
    assert len(streams) == 1
    assert pkg.level == logging.DEBUG
    assert get_logger("txnledger.ledger").getEffectiveLevel() == logging.DEBUG
