"""Create/Update/Delete state machine shared by both providers.

Subclasses implement ``handle_create``.  Update re-runs the create logic in
full and keeps the caller's physical id; Delete never touches a backend.
Every failure is logged with the event and traceback, then replaced with
an opaque ``ProviderFailed`` so no detail leaks into the CloudFormation
response.
"""

from __future__ import annotations

import abc
import json
import logging
from typing import Any

from sopsprovider.handlers.events import (
    CreateEvent,
    DeleteEvent,
    LifecycleResponse,
    UpdateEvent,
    parse_event,
)
from sopsprovider.shared.errors import ProviderFailed, UnknownEventType

logger = logging.getLogger(__name__)


class LifecycleHandler(abc.ABC):
    """Base class for a custom-resource provider."""

    @abc.abstractmethod
    def handle_create(self, properties: dict[str, Any]) -> LifecycleResponse:
        """Decrypt, resolve and publish; return the new physical id."""

    def handle_update(self, event: UpdateEvent) -> LifecycleResponse:
        response = self.handle_create(event.properties)
        return LifecycleResponse(
            physical_resource_id=event.physical_resource_id,
            data=response.data,
        )

    def handle_delete(self, event: DeleteEvent) -> LifecycleResponse:
        return LifecycleResponse(physical_resource_id=event.physical_resource_id)

    def on_event(self, event: dict[str, Any]) -> dict[str, Any]:
        """Handle one provider-framework event.

        Raises:
            ProviderFailed: On any error; the cause is only logged.
        """
        logger.info("Handling event: %s", json.dumps(event, default=str))
        try:
            lifecycle_event = parse_event(event)
            if isinstance(lifecycle_event, CreateEvent):
                response = self.handle_create(lifecycle_event.properties)
            elif isinstance(lifecycle_event, UpdateEvent):
                response = self.handle_update(lifecycle_event)
            elif isinstance(lifecycle_event, DeleteEvent):
                response = self.handle_delete(lifecycle_event)
            else:
                raise UnknownEventType(type(lifecycle_event).__name__)
        except Exception:
            logger.exception(
                "Unhandled error, failing: %s", json.dumps(event, default=str)
            )
            raise ProviderFailed() from None

        logger.info("Responding: %s", json.dumps(response.to_dict()))
        return response.to_dict()
