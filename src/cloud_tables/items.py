"""
Typed resource items.

Each list or get function wraps the raw boto3 payload in the ResourceItem
subclass for its resource kind, so hydrators and transforms work with named
properties rather than guessing at dictionary shapes.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class ResourceItem:
    """An immutable resource record returned by a list or get call."""

    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    @property
    def key(self) -> Optional[str]:
        """Identity of the item, used in log and error messages."""
        return None

    def get(self, name: str, default: Any = None) -> Any:
        return self.data.get(name, default)


@dataclass(frozen=True)
class IamUser(ResourceItem):
    @property
    def user_name(self) -> str:
        return self.data["UserName"]

    @property
    def key(self) -> Optional[str]:
        return self.data.get("UserName")


@dataclass(frozen=True)
class IamRole(ResourceItem):
    @property
    def role_name(self) -> str:
        return self.data["RoleName"]

    @property
    def key(self) -> Optional[str]:
        return self.data.get("RoleName")


@dataclass(frozen=True)
class MaintenanceWindow(ResourceItem):
    @property
    def window_id(self) -> str:
        return self.data["WindowId"]

    @property
    def key(self) -> Optional[str]:
        return self.data.get("WindowId")


@dataclass(frozen=True)
class SqsQueue(ResourceItem):
    @property
    def queue_url(self) -> str:
        return self.data["QueueUrl"]

    @property
    def key(self) -> Optional[str]:
        return self.data.get("QueueUrl")


@dataclass(frozen=True)
class Vpc(ResourceItem):
    @property
    def vpc_id(self) -> str:
        return self.data["VpcId"]

    @property
    def key(self) -> Optional[str]:
        return self.data.get("VpcId")
