"""Unit tests for OperationResult and OperationStatus."""

import pytest
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus


@pytest.mark.unit
class TestOperationStatus:
    def test_values(self):
        assert OperationStatus.SUCCESS.value == "success"
        assert OperationStatus.TRANSIENT_ERROR.value == "transient_error"
        assert OperationStatus.PERMANENT_ERROR.value == "permanent_error"


@pytest.mark.unit
class TestOperationResult:
    def test_success_factory_minimal(self):
        result = OperationResult.success()

        assert result.is_success
        assert result.message == "ok"
        assert result.data is None

    def test_success_factory_with_data(self):
        result = OperationResult.success(data={"ts": "1.2"}, message="Posted")

        assert result.data == {"ts": "1.2"}
        assert result.message == "Posted"

    def test_transient_error_factory(self):
        result = OperationResult.transient_error(
            "Rate limited", error_code="HTTP_429", retry_after=30
        )

        assert not result.is_success
        assert result.is_transient
        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.retry_after == 30

    def test_permanent_error_factory(self):
        result = OperationResult.permanent_error(
            "LINE channel access token is not configured",
            error_code="LINE_NOT_CONFIGURED",
        )

        assert not result.is_success
        assert not result.is_transient
        assert result.error_code == "LINE_NOT_CONFIGURED"
