"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest

from cmdpilot.exceptions import (
    CmdPilotError,
    ExecutionError,
    InvalidTransitionError,
    PolicyConfigError,
    StoreError,
)


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "exc_cls", [PolicyConfigError, ExecutionError, InvalidTransitionError, StoreError]
    )
    def test_inherits_base(self, exc_cls):
        assert issubclass(exc_cls, CmdPilotError)

    def test_base_is_exception(self):
        assert issubclass(CmdPilotError, Exception)


class TestExceptionInstantiation:
    def test_execution_error_with_step_id(self):
        err = ExecutionError("failed", step_id="step-3")
        assert str(err) == "failed"
        assert err.step_id == "step-3"

    def test_execution_error_default_step_id(self):
        assert ExecutionError("failed").step_id == ""

    def test_catch_as_base(self):
        with pytest.raises(CmdPilotError):
            raise PolicyConfigError("bad config")
