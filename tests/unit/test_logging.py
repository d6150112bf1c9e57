"""Tests for structured audit logging helpers."""

from unittest.mock import Mock

import pytest

from atlas_app.logging.config import (
    configure_logging,
    get_risk_logger,
    get_signal_logger,
    log_filter_decision,
    log_risk_state,
)


class TestAuditLogging:
    """Test filter and risk-state audit events."""

    def setup_method(self):
        configure_logging(level="DEBUG", format_json=True)
        self.mock_logger = Mock()
        self.mock_logger.bind.return_value = self.mock_logger

    def test_filter_decision_pass(self):
        log_filter_decision(self.mock_logger, "volume_confirmation", True, "XBTUSD",
                            "volume_ratio > 1.2", context={"volume_ratio": 1.6})

        first_bind = self.mock_logger.bind.call_args_list[0].kwargs
        assert first_bind["filter_result"] == "PASS"
        assert first_bind["filter_name"] == "volume_confirmation"
        self.mock_logger.bind.assert_any_call(context={"volume_ratio": 1.6})
        self.mock_logger.debug.assert_called_once_with("Signal filter evaluated")

    def test_filter_decision_fail_without_context(self):
        log_filter_decision(self.mock_logger, "adx_trending", False, "ETHUSD", "adx > 25")

        assert self.mock_logger.bind.call_count == 1
        assert self.mock_logger.bind.call_args.kwargs["filter_result"] == "FAIL"

    @pytest.mark.parametrize("state,method", [
        ("halted", "critical"),
        ("warning", "warning"),
        ("normal", "info"),
    ])
    def test_risk_state_levels(self, state, method):
        log_risk_state(self.mock_logger, "user-1", state, state == "halted", 1)

        getattr(self.mock_logger, method).assert_called_once()
        assert self.mock_logger.bind.call_args_list[0].kwargs["risk_state"] == state

    def test_subsystem_loggers(self):
        # Bound loggers are usable without errors once logging is configured
        get_signal_logger(__name__).debug("signal logger ready")
        get_risk_logger(__name__).info("risk logger ready")
