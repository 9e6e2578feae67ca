"""Tests for exception classes."""

import pytest

from reconciler.exceptions import (
    ImportRequired,
    ImportTargetNotFound,
    LockAcquisitionFailed,
    MalformedIDError,
    OperationCanceled,
    OperationTimeout,
    PollingCanceled,
    PollingError,
    PollingFailed,
    PollingTimedOut,
    ReconcilerError,
    ReconciliationError,
    RemoteError,
    RemoteMutationFailed,
    RemoteQueryFailed,
    RemoteRequestError,
    UnknownResourceTypeError,
    UnsupportedOperationError,
    ValidationError,
)
from reconciler.polling import PendingOperation


class TestHierarchy:
    """Every error is catchable as ReconcilerError."""

    @pytest.mark.parametrize(
        "cls,parent",
        [
            (ValidationError, ReconcilerError),
            (MalformedIDError, ReconcilerError),
            (UnknownResourceTypeError, ReconcilerError),
            (UnsupportedOperationError, ReconcilerError),
            (RemoteRequestError, RemoteError),
            (PollingFailed, PollingError),
            (PollingTimedOut, PollingError),
            (PollingCanceled, PollingError),
            (PollingError, RemoteError),
            (RemoteError, ReconcilerError),
            (RemoteQueryFailed, ReconciliationError),
            (ImportRequired, ReconciliationError),
            (ImportTargetNotFound, ReconciliationError),
            (RemoteMutationFailed, ReconciliationError),
            (OperationTimeout, ReconciliationError),
            (OperationCanceled, ReconciliationError),
            (LockAcquisitionFailed, ReconciliationError),
            (ReconciliationError, ReconcilerError),
        ],
    )
    def test_subclass(self, cls, parent):
        assert issubclass(cls, parent)

    def test_timeout_is_not_mutation_failure(self):
        assert not issubclass(OperationTimeout, RemoteMutationFailed)


class TestReconciliationError:
    """Tests for ReconciliationError context."""

    def test_message_carries_context(self):
        cause = RemoteRequestError("boom", status_code=500)
        error = RemoteQueryFailed(
            "retrieving remote state failed",
            operation="read",
            resource_id="/widgets/w1",
            cause=cause,
        )

        assert error.operation == "read"
        assert error.resource_id == "/widgets/w1"
        assert error.cause is cause
        assert str(error) == (
            "read: retrieving remote state failed [id=/widgets/w1] "
            "caused by: boom (status=500)"
        )

    def test_message_without_optional_context(self):
        assert str(OperationCanceled("stopped", operation="delete")) == "delete: stopped"

    def test_import_required(self):
        error = ImportRequired("azurerm_disk_pool", "/x/pool1")

        assert error.operation == "create"
        assert error.type_name == "azurerm_disk_pool"
        assert "needs to be imported" in str(error)
        assert "'/x/pool1'" in str(error)

    def test_import_target_not_found(self):
        error = ImportTargetNotFound("azurerm_disk_pool", "/x/pool1")
        assert error.operation == "import"
        assert error.resource_id == "/x/pool1"

    def test_timeout_seconds(self):
        error = OperationTimeout("too slow", operation="update", timeout_seconds=1800)
        assert error.timeout_seconds == 1800


class TestInputErrors:
    """Tests for input error messages."""

    def test_validation_error(self):
        error = ValidationError("sku_name", "Gold", "unknown tier")
        assert error.field == "sku_name"
        assert str(error) == "Invalid sku_name 'Gold': unknown tier"

    def test_malformed_id(self):
        error = MalformedIDError("pool1", "must start with '/'", expected="/a/{b}", operation="read")
        assert str(error) == (
            "read: Malformed resource ID 'pool1': must start with '/' (expected /a/{b})"
        )

    def test_unsupported_operation(self):
        error = UnsupportedOperationError("test_widget", "update")
        assert str(error) == "Resource type test_widget does not support update"


class TestPollingErrors:
    """Tests for polling error messages."""

    def test_failed_without_details(self):
        op = PendingOperation("delete", "/x/pool1")
        assert "no error details" in str(PollingFailed(op))

    def test_timed_out_reports_attempts(self):
        op = PendingOperation("create", "/x/pool1", attempts=4)
        error = PollingTimedOut(op)
        assert error.operation is op
        assert "4 status checks" in str(error)
