"""Reconciliation engine.

Drives registered resource types through Create, Read, Update, Delete
and Import against their remote client adapters. One engine call is one
asyncio task; the engine spawns no tasks of its own.

Example:
    engine = ReconciliationEngine(EngineOptions.from_env())
    engine.register(DiskPoolResource(), DiskPoolsClient(config))

    state = ResourceData(desired={...})
    await engine.create("azurerm_disk_pool", state)
    await engine.read("azurerm_disk_pool", state)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .client import RemoteClientProtocol, RemoteSnapshot
from .config import EngineOptions
from .context import OperationContext
from .diff import ModelDiff, compute_diff
from .exceptions import (
    ImportTargetNotFound,
    MalformedIDError,
    OperationCanceled,
    OperationTimeout,
    PollingCanceled,
    PollingTimedOut,
    RemoteError,
    RemoteMutationFailed,
    RemoteQueryFailed,
    UnknownResourceTypeError,
    UnsupportedOperationError,
)
from .identifiers import ResourceIdentifier
from .locks import MutationLockManager
from .resource import Resource
from .state import StateHandle

logger = logging.getLogger(__name__)


class Operation(Enum):
    """Reconciliation operations a host can request."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    IMPORT = "import"


@dataclass(frozen=True)
class ResourceBinding:
    """The capabilities registered for one resource type."""

    resource: Resource[Any, Any]
    client: RemoteClientProtocol


class ReconciliationEngine:
    """
    Generic CRUD/Import driver for registered resource types.

    Guarantees:

    - Create, Update, and Delete of the same identifier never overlap;
      Read takes no lock and may observe an in-flight mutation.
    - Create never adopts an object that already exists remotely.
    - Update payloads never contain force-new fields.
    - Whole operations are never retried; adapter errors are returned
      wrapped in a ReconciliationError carrying operation and identifier.
    """

    def __init__(
        self,
        options: EngineOptions | None = None,
        *,
        locks: MutationLockManager | None = None,
    ) -> None:
        """
        Args:
            options: Engine options (default: ``EngineOptions.from_env()``)
            locks: Lock manager to share with other engines (default: a new one)
        """
        self.options = options if options is not None else EngineOptions.from_env()
        self.locks = locks if locks is not None else MutationLockManager()
        self._bindings: dict[str, ResourceBinding] = {}

    # -------------------------------------------------------------------------
    # Registry
    # -------------------------------------------------------------------------

    def register(self, resource: Resource[Any, Any], client: RemoteClientProtocol) -> None:
        """
        Register a resource type with the adapter that talks to its API.

        Raises:
            TypeError: If ``client`` does not implement RemoteClientProtocol
            ValueError: If the type name is already registered
        """
        if not isinstance(client, RemoteClientProtocol):
            raise TypeError(f"{type(client).__name__} does not implement RemoteClientProtocol")
        if resource.type_name in self._bindings:
            raise ValueError(f"resource type {resource.type_name} is already registered")
        self._bindings[resource.type_name] = ResourceBinding(resource, client)
        logger.debug("Registered resource type %s", resource.type_name)

    def binding(self, type_name: str) -> ResourceBinding:
        """
        Look up a registered resource type.

        Raises:
            UnknownResourceTypeError: If nothing is registered under ``type_name``
        """
        try:
            return self._bindings[type_name]
        except KeyError:
            raise UnknownResourceTypeError(type_name) from None

    @property
    def resource_types(self) -> list[str]:
        return sorted(self._bindings)

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    async def run(
        self,
        operation: Operation | str,
        type_name: str,
        state: StateHandle,
        ctx: OperationContext | None = None,
        *,
        resource_id: str | None = None,
    ) -> Any:
        """
        Run ``operation`` for one resource instance.

        Args:
            operation: Operation or its name
            type_name: Registered resource type
            state: The instance's state handle
            ctx: Caller deadline and cancellation (default: unbounded)
            resource_id: Identifier to adopt (import only)
        """
        operation = Operation(operation)
        if operation is Operation.CREATE:
            return await self.create(type_name, state, ctx)
        if operation is Operation.READ:
            return await self.read(type_name, state, ctx)
        if operation is Operation.UPDATE:
            return await self.update(type_name, state, ctx)
        if operation is Operation.DELETE:
            return await self.delete(type_name, state, ctx)
        if resource_id is None:
            raise ValueError("import requires resource_id")
        return await self.import_(type_name, resource_id, state, ctx)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def create(
        self,
        type_name: str,
        state: StateHandle,
        ctx: OperationContext | None = None,
    ) -> str:
        """
        Create the object described by the state's configuration.

        Returns:
            The canonical identifier bound to the state

        Raises:
            ValidationError: Configuration is invalid
            ImportRequired: The object already exists remotely
            RemoteQueryFailed: The existence check failed
            RemoteMutationFailed: The remote API rejected the creation
            OperationTimeout: The create budget ran out
            OperationCanceled: ``ctx`` was cancelled
        """
        binding = self.binding(type_name)
        resource = binding.resource

        model = resource.codec.decode(state.config())
        resource.validate(model)
        resource_id = resource.identifier_for(model, self.options.require_subscription_id())
        key = str(resource_id)
        op_ctx = self._context(ctx, resource, "create")

        async with self.locks.hold(key, self.options.lock_timeout, operation="create"):
            snapshot = await self._get(binding, resource_id, op_ctx, "create")
            if snapshot.present:
                raise state.resource_requires_import(resource.type_name, key)

            payload = resource.build_create_payload(model)
            await self._mutate(
                "create",
                key,
                op_ctx,
                binding.client.create_or_update_and_poll(resource_id, payload, op_ctx),
            )

        state.set_id(key)
        logger.info("Created %s %s", resource.type_name, key)
        return key

    async def read(
        self,
        type_name: str,
        state: StateHandle,
        ctx: OperationContext | None = None,
    ) -> Any | None:
        """
        Refresh state from the remote API.

        Returns:
            The flattened model, or None if the object no longer exists
            (the state is then marked gone; this is not an error)

        Raises:
            MalformedIDError: The bound identifier does not parse
            RemoteQueryFailed: The remote query failed
            OperationTimeout: The read budget ran out
        """
        return await self._read(self.binding(type_name), state, ctx, "read")

    async def update(
        self,
        type_name: str,
        state: StateHandle,
        ctx: OperationContext | None = None,
    ) -> ModelDiff:
        """
        Apply changed updatable fields in place.

        The payload is built from an explicit diff between the recorded
        state and the configuration. Changes to force-new fields are
        dropped: they need replacement, which the host plans as
        Delete + Create. No read-back is performed.

        Returns:
            The applied diff (empty if nothing updatable changed)

        Raises:
            MalformedIDError: The bound identifier does not parse
            UnsupportedOperationError: The resource has no in-place update
            RemoteMutationFailed: The remote API rejected the update
            OperationTimeout: The update budget ran out
            OperationCanceled: ``ctx`` was cancelled
        """
        binding = self.binding(type_name)
        resource = binding.resource
        if not resource.supports_update:
            raise UnsupportedOperationError(type_name, "update")

        resource_id = self._parse_id(resource, state.id, "update")
        key = str(resource_id)
        op_ctx = self._context(ctx, resource, "update")

        async with self.locks.hold(key, self.options.lock_timeout, operation="update"):
            previous = resource.codec.decode(state.prior())
            desired = resource.codec.decode(state.config())
            resource.validate(desired)

            diff = compute_diff(previous, desired)
            if diff.requires_replacement:
                logger.warning(
                    "Ignoring changes to force-new fields %s of %s: they require replacement",
                    sorted(c.name for c in diff.force_new_changes),
                    key,
                )
            changes = diff.updatable()
            if not changes:
                logger.debug("No updatable changes for %s", key)
                return changes

            payload = resource.build_update_payload(desired, changes)
            await self._mutate(
                "update",
                key,
                op_ctx,
                binding.client.update_and_poll(resource_id, payload, op_ctx),
            )

        logger.info("Updated %s %s: %s", resource.type_name, key, sorted(changes.names))
        return changes

    async def delete(
        self,
        type_name: str,
        state: StateHandle,
        ctx: OperationContext | None = None,
    ) -> None:
        """
        Delete the remote object and drop it from state.

        Deleting an object that is already gone succeeds. On failure the
        state is left untouched so the delete can be retried.

        Raises:
            MalformedIDError: The bound identifier does not parse
            RemoteMutationFailed: The remote API rejected the deletion
            OperationTimeout: The delete budget ran out
            OperationCanceled: ``ctx`` was cancelled
        """
        binding = self.binding(type_name)
        resource = binding.resource
        resource_id = self._parse_id(resource, state.id, "delete")
        key = str(resource_id)
        op_ctx = self._context(ctx, resource, "delete")

        async with self.locks.hold(key, self.options.lock_timeout, operation="delete"):
            await self._mutate(
                "delete",
                key,
                op_ctx,
                binding.client.delete_and_poll(resource_id, op_ctx),
            )

        state.mark_as_gone()
        logger.info("Deleted %s %s", resource.type_name, key)

    async def import_(
        self,
        type_name: str,
        resource_id: str,
        state: StateHandle,
        ctx: OperationContext | None = None,
    ) -> Any:
        """
        Adopt an existing remote object into state.

        Returns:
            The flattened model of the imported object

        Raises:
            ValidationError: ``resource_id`` is not a valid identifier
            ImportTargetNotFound: Nothing exists remotely at ``resource_id``
        """
        binding = self.binding(type_name)
        resource = binding.resource
        resource.validate_id(resource_id)
        key = str(self._parse_id(resource, resource_id, "import"))

        state.set_id(key)
        model = await self._read(binding, state, ctx, "import")
        if model is None:
            raise ImportTargetNotFound(type_name, key)
        logger.info("Imported %s %s", type_name, key)
        return model

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _read(
        self,
        binding: ResourceBinding,
        state: StateHandle,
        ctx: OperationContext | None,
        operation: str,
    ) -> Any | None:
        resource = binding.resource
        resource_id = self._parse_id(resource, state.id, operation)
        key = str(resource_id)
        op_ctx = self._context(ctx, resource, operation)

        snapshot = await self._get(binding, resource_id, op_ctx, operation)
        if not snapshot.present:
            logger.info("%s %s was not found - removing from state", resource.type_name, key)
            state.mark_as_gone()
            return None

        model = resource.flatten(resource_id, snapshot)
        state.encode(resource.codec.encode(model))
        return model

    def _timeout(self, resource: Resource[Any, Any], operation: str) -> float:
        override = self.options.timeouts.get(operation)
        if override is not None:
            return override
        return resource.timeouts.for_operation(operation)

    def _context(
        self,
        ctx: OperationContext | None,
        resource: Resource[Any, Any],
        operation: str,
    ) -> OperationContext:
        return (ctx or OperationContext()).with_timeout(self._timeout(resource, operation))

    def _parse_id(
        self,
        resource: Resource[Any, Any],
        value: str | None,
        operation: str,
    ) -> ResourceIdentifier:
        try:
            return resource.parse_id(value)  # type: ignore[arg-type]
        except MalformedIDError as e:
            raise MalformedIDError(
                e.value, e.reason, expected=e.expected, operation=operation
            ) from e

    async def _get(
        self,
        binding: ResourceBinding,
        resource_id: ResourceIdentifier,
        ctx: OperationContext,
        operation: str,
    ) -> RemoteSnapshot:
        key = str(resource_id)
        if ctx.cancelled:
            raise OperationCanceled("canceled before retrieving", operation=operation, resource_id=key)
        try:
            return await asyncio.wait_for(binding.client.get(resource_id), timeout=ctx.remaining())
        except TimeoutError as e:
            raise OperationTimeout(
                "timed out retrieving remote state",
                operation=operation,
                resource_id=key,
                timeout_seconds=self._timeout(binding.resource, operation),
                cause=e,
            ) from e
        except RemoteError as e:
            raise RemoteQueryFailed(
                "retrieving remote state failed", operation=operation, resource_id=key, cause=e
            ) from e

    async def _mutate(
        self,
        operation: str,
        key: str,
        ctx: OperationContext,
        call: Awaitable[None],
    ) -> None:
        """Await one adapter mutation and translate its errors."""
        try:
            await asyncio.wait_for(call, timeout=ctx.remaining())
        except (TimeoutError, PollingTimedOut) as e:
            raise OperationTimeout(
                f"{operation} did not finish before its deadline; the remote change "
                "may still complete, refresh before retrying",
                operation=operation,
                resource_id=key,
                cause=e,
            ) from e
        except PollingCanceled as e:
            raise OperationCanceled(
                f"{operation} was canceled", operation=operation, resource_id=key, cause=e
            ) from e
        except RemoteError as e:
            raise RemoteMutationFailed(
                f"{operation} failed", operation=operation, resource_id=key, cause=e
            ) from e
