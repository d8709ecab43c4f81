"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from clinic_scheduler.config import (
    AppConfig,
    ClinicConfig,
    SchedulingConfig,
    _safe_bool,
    _safe_int,
    _safe_weekdays,
    _validate_config,
)


def _with_scheduling(**fields) -> AppConfig:
    return replace(AppConfig(), scheduling=replace(SchedulingConfig(), **fields))


def _with_clinic(**fields) -> AppConfig:
    return replace(AppConfig(), clinic=replace(ClinicConfig(), **fields))


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_defaults_match_reference_clinic(self):
        config = AppConfig()
        assert config.scheduling.block_length_minutes == 30
        assert config.scheduling.non_operating_weekdays == frozenset({5, 6})
        assert config.scheduling.duration_rounding == "floor"
        assert config.scheduling.cancelled_frees_slot is False

    def test_invalid_block_length(self):
        with pytest.raises(ValueError, match="BLOCK_LENGTH_MINUTES"):
            _validate_config(_with_scheduling(block_length_minutes=0))

    def test_invalid_rounding_mode(self):
        with pytest.raises(ValueError, match="DURATION_ROUNDING"):
            _validate_config(_with_scheduling(duration_rounding="nearest"))

    def test_every_day_closed_rejected(self):
        with pytest.raises(ValueError, match="NON_OPERATING_WEEKDAYS"):
            _validate_config(_with_scheduling(non_operating_weekdays=frozenset(range(7))))

    def test_bad_open_time(self):
        with pytest.raises(ValueError, match="CLINIC_OPEN_TIME"):
            _validate_config(_with_clinic(open_time="9am"))

    def test_close_before_open(self):
        with pytest.raises(ValueError, match="CLINIC_CLOSE_TIME"):
            _validate_config(_with_clinic(open_time="17:00", close_time="09:00"))


class TestEnvParsing:
    def test_safe_int_parsing(self):
        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_int_bad_value(self, monkeypatch):
        monkeypatch.setenv("BLOCK_LENGTH_TEST", "thirty")
        with pytest.raises(ValueError, match="BLOCK_LENGTH_TEST"):
            _safe_int("BLOCK_LENGTH_TEST", "30")

    @pytest.mark.parametrize("raw, expected", [("true", True), ("No", False), ("1", True), ("off", False)])
    def test_safe_bool_parsing(self, monkeypatch, raw, expected):
        monkeypatch.setenv("FLAG_TEST", raw)
        assert _safe_bool("FLAG_TEST", "false") is expected

    def test_safe_bool_bad_value(self, monkeypatch):
        monkeypatch.setenv("FLAG_TEST", "maybe")
        with pytest.raises(ValueError, match="FLAG_TEST"):
            _safe_bool("FLAG_TEST", "false")

    def test_safe_weekdays_bad_value(self, monkeypatch):
        monkeypatch.setenv("CLOSED_TEST", "sat,funday")
        with pytest.raises(ValueError, match="CLOSED_TEST"):
            _safe_weekdays("CLOSED_TEST", "sat,sun")


class TestLoadConfig:
    def test_root_handlers_carry_request_id(self):
        import logging

        from clinic_scheduler.config import load_config
        from clinic_scheduler.logging_context import REQUEST_LOG_FORMAT, RequestIdFilter

        load_config()
        handlers = logging.getLogger().handlers
        assert handlers
        for handler in handlers:
            assert any(isinstance(f, RequestIdFilter) for f in handler.filters)
        assert "%(request_id)s" in REQUEST_LOG_FORMAT
