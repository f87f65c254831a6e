"""Tests for scan configuration loading and channel operation parsing."""

import os
from unittest.mock import patch

import pytest

from tests.base.base_test import BaseTest
from wavscan.config.scan_config import (
    ScanConfig,
    get_config,
    parse_channel_operation,
    parse_channel_operations,
)
from wavscan.core.interfaces import ChannelOperation
from wavscan.utils.exceptions import ConfigurationError


class TestScanConfig(BaseTest):
    """Environment loading and validation."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = get_config()

        assert config.chunk_size_ms == 100
        assert config.adjust_gain_db == 0.0
        assert config.overwrite_output is True
        assert config.log_level == "INFO"

    def test_from_env(self):
        test_env = {
            "WAVSCAN_CHUNK_SIZE_MS": "250",
            "WAVSCAN_ADJUST_GAIN_DB": "-6.5",
            "WAVSCAN_OVERWRITE_OUTPUT": "no",
            "LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, test_env, clear=True):
            config = ScanConfig.from_env()

        assert config.to_dict() == {
            "chunk_size_ms": 250,
            "adjust_gain_db": -6.5,
            "overwrite_output": False,
            "log_level": "DEBUG",
        }

    def test_invalid_numbers_fall_back_to_defaults(self):
        test_env = {"WAVSCAN_CHUNK_SIZE_MS": "fast", "WAVSCAN_ADJUST_GAIN_DB": "loud"}
        with patch.dict(os.environ, test_env, clear=True):
            config = ScanConfig.from_env()

        assert config.chunk_size_ms == 100
        assert config.adjust_gain_db == 0.0

    def test_validation_collects_errors(self):
        with pytest.raises(ValueError) as exc_info:
            ScanConfig(chunk_size_ms=0, adjust_gain_db=200.0, log_level="chatty")

        message = str(exc_info.value)
        assert "Chunk size must be positive" in message
        assert "Adjust gain must be between" in message
        assert "Invalid log_level 'CHATTY'" in message


class TestParseChannelOperation(BaseTest):
    """Operation text parsing."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("0:1", ChannelOperation(0, 1, adjust=False)),
            ("2:0:adjust", ChannelOperation(2, 0, adjust=True)),
            (" 1 : 1 : COPY ", ChannelOperation(1, 1, adjust=False)),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_channel_operation(text) == expected

    @pytest.mark.parametrize("text", ["0", "0:1:2:3", "a:1", "0:-1", "0:1:boost", ""])
    def test_invalid(self, text):
        with pytest.raises(ConfigurationError):
            parse_channel_operation(text)

    def test_list_keeps_order(self):
        operations = parse_channel_operations(["1:0", "0:1:adjust"])
        assert operations == [ChannelOperation(1, 0), ChannelOperation(0, 1, adjust=True)]

    def test_duplicate_output_rejected(self):
        with pytest.raises(ConfigurationError, match="mapped more than once"):
            parse_channel_operations(["0:1", "1:1"])

    def test_describe(self):
        assert ChannelOperation(0, 1, adjust=True).describe() == "0-> 1 (adjust)"
