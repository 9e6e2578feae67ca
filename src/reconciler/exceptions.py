"""Exceptions for resource-reconciler."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .polling import PendingOperation


# ---------------------------------------------------------------------------
# Base Exception
# ---------------------------------------------------------------------------


class ReconcilerError(Exception):
    """
    Base exception for all resource-reconciler errors.

    All exceptions raised by this library inherit from this class,
    allowing hosts to catch all library-specific errors with a single
    except clause.
    """

    pass


# ---------------------------------------------------------------------------
# Input Exceptions
# ---------------------------------------------------------------------------


class ValidationError(ReconcilerError):
    """Raised when a configuration value fails validation."""

    def __init__(self, field: str, value: Any, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} {value!r}: {reason}")


class MalformedIDError(ReconcilerError):
    """
    Raised when a resource identifier string cannot be parsed.

    This is fatal and never retried. A bound identifier that fails to
    parse means the host's state is corrupt or was written by something
    else.

    Attributes:
        value: The offending identifier string
        reason: What did not match
        expected: The identifier template that was expected (if known)
        operation: The reconciliation operation being run (if known)
    """

    def __init__(
        self,
        value: Any,
        reason: str,
        *,
        expected: str | None = None,
        operation: str | None = None,
    ) -> None:
        self.value = value
        self.reason = reason
        self.expected = expected
        self.operation = operation
        msg = f"Malformed resource ID {value!r}: {reason}"
        if expected:
            msg += f" (expected {expected})"
        if operation:
            msg = f"{operation}: {msg}"
        super().__init__(msg)


class UnknownResourceTypeError(ReconcilerError):
    """Raised when no resource is registered under a type name."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Unknown resource type: {type_name}")


class UnsupportedOperationError(ReconcilerError):
    """Raised when a resource does not implement the requested operation."""

    def __init__(self, type_name: str, operation: str) -> None:
        self.type_name = type_name
        self.operation = operation
        super().__init__(f"Resource type {type_name} does not support {operation}")


# ---------------------------------------------------------------------------
# Remote (adapter) Exceptions
# ---------------------------------------------------------------------------


class RemoteError(ReconcilerError):
    """
    Base exception for errors raised by remote client adapters.

    The engine never lets these escape unwrapped; they are translated
    into a ReconciliationError subclass carrying operation context.
    """

    pass


class RemoteRequestError(RemoteError):
    """
    Raised when a single request to the remote API fails.

    Attributes:
        status_code: HTTP status code (if a response was received)
        response_body: Raw response text, truncated (if available)
        retryable: Whether the transport considers the failure transient
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_body: str | None = None,
        retryable: bool = False,
    ) -> None:
        self.status_code = status_code
        self.response_body = response_body
        self.retryable = retryable
        if status_code is not None:
            message = f"{message} (status={status_code})"
        super().__init__(message)


class PollingError(RemoteError):
    """Base exception for long-running operations that did not succeed."""

    def __init__(self, operation: "PendingOperation", message: str) -> None:
        self.operation = operation
        super().__init__(message)


class PollingFailed(PollingError):  # noqa: N818
    """Raised when the remote API reports a terminal failure for an operation."""

    def __init__(self, operation: "PendingOperation") -> None:
        reason = operation.error or "no error details"
        super().__init__(
            operation,
            f"{operation.kind} of {operation.resource_id} failed remotely: {reason}",
        )


class PollingTimedOut(PollingError):  # noqa: N818
    """
    Raised when an operation is still running at its deadline.

    The remote side effect may still complete. Callers should re-read
    before assuming the operation failed.
    """

    def __init__(self, operation: "PendingOperation") -> None:
        super().__init__(
            operation,
            f"{operation.kind} of {operation.resource_id} did not finish before its "
            f"deadline ({operation.attempts} status checks)",
        )


class PollingCanceled(PollingError):  # noqa: N818
    """Raised when the caller cancels while an operation is being polled."""

    def __init__(self, operation: "PendingOperation") -> None:
        super().__init__(
            operation,
            f"Polling {operation.kind} of {operation.resource_id} was canceled",
        )


# ---------------------------------------------------------------------------
# Reconciliation (engine) Exceptions
# ---------------------------------------------------------------------------


class ReconciliationError(ReconcilerError):
    """
    Base exception for a failed reconciliation call.

    Attributes:
        operation: The operation that failed (create, read, update, delete, import)
        resource_id: Canonical identifier of the resource (if known)
        cause: The underlying exception (if any)
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        resource_id: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.operation = operation
        self.resource_id = resource_id
        self.cause = cause
        super().__init__(self._format_message(message))

    def _format_message(self, message: str) -> str:
        parts = [f"{self.operation}:", message]
        if self.resource_id:
            parts.append(f"[id={self.resource_id}]")
        if self.cause is not None:
            parts.append(f"caused by: {self.cause}")
        return " ".join(parts)


class RemoteQueryFailed(ReconciliationError):  # noqa: N818
    """Raised when reading remote state fails for a reason other than not-found."""

    pass


class ImportRequired(ReconciliationError):  # noqa: N818
    """
    Raised when Create finds the object already present remotely.

    This is an expected signal, not a fault: the object was created out
    of band and must be imported instead of created.
    """

    def __init__(self, type_name: str, resource_id: str) -> None:
        self.type_name = type_name
        super().__init__(
            f"A resource with the ID {resource_id!r} already exists - to be managed "
            f"it needs to be imported into state as {type_name}",
            operation="create",
            resource_id=resource_id,
        )


class ImportTargetNotFound(ReconciliationError):  # noqa: N818
    """Raised when importing an identifier that does not exist remotely."""

    def __init__(self, type_name: str, resource_id: str) -> None:
        self.type_name = type_name
        super().__init__(
            f"cannot import non-existent remote object as {type_name}",
            operation="import",
            resource_id=resource_id,
        )


class RemoteMutationFailed(ReconciliationError):  # noqa: N818
    """Raised when the remote API terminally rejects a create, update, or delete."""

    pass


class OperationTimeout(ReconciliationError):  # noqa: N818
    """
    Raised when an operation exceeds its deadline.

    Distinct from RemoteMutationFailed: the remote side effect may or may
    not have happened.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        resource_id: str | None = None,
        timeout_seconds: float | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(message, operation=operation, resource_id=resource_id, cause=cause)


class OperationCanceled(ReconciliationError):  # noqa: N818
    """Raised when the caller cancels an operation in flight."""

    pass


class LockAcquisitionFailed(ReconciliationError):  # noqa: N818
    """
    Raised when a mutation lock cannot be acquired.

    Unreachable unless a lock timeout is configured. Treated as fatal.
    """

    pass
