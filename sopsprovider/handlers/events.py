"""CloudFormation custom-resource lifecycle events and responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from sopsprovider.shared.constants import REQUEST_CREATE, REQUEST_DELETE, REQUEST_UPDATE
from sopsprovider.shared.errors import ConfigurationError, UnknownEventType


@dataclass(frozen=True)
class CreateEvent:
    properties: dict[str, Any]


@dataclass(frozen=True)
class UpdateEvent:
    properties: dict[str, Any]
    physical_resource_id: str
    old_properties: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteEvent:
    physical_resource_id: str
    properties: dict[str, Any] = field(default_factory=dict)


LifecycleEvent = Union[CreateEvent, UpdateEvent, DeleteEvent]


@dataclass(frozen=True)
class LifecycleResponse:
    physical_resource_id: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"PhysicalResourceId": self.physical_resource_id, "Data": dict(self.data)}


def _physical_resource_id(event: dict[str, Any]) -> str:
    physical_id = event.get("PhysicalResourceId")
    if not isinstance(physical_id, str) or not physical_id:
        raise ConfigurationError(
            f"{event.get('RequestType')} event is missing PhysicalResourceId"
        )
    return physical_id


def parse_event(event: dict[str, Any]) -> LifecycleEvent:
    """Turn a raw provider-framework event into a typed lifecycle event.

    Raises:
        UnknownEventType: If ``RequestType`` is not Create, Update or Delete.
        ConfigurationError: If a required field is missing.
    """
    request_type = event.get("RequestType")
    properties = event.get("ResourceProperties") or {}

    if request_type == REQUEST_CREATE:
        return CreateEvent(properties=properties)
    if request_type == REQUEST_UPDATE:
        return UpdateEvent(
            properties=properties,
            physical_resource_id=_physical_resource_id(event),
            old_properties=event.get("OldResourceProperties") or {},
        )
    if request_type == REQUEST_DELETE:
        return DeleteEvent(
            physical_resource_id=_physical_resource_id(event),
            properties=properties,
        )
    raise UnknownEventType(request_type)
