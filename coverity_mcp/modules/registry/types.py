"""Capability unit contract shared by the registry and the units themselves."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union


class CapabilityKind(str, Enum):
    """What a capability unit registers with the host."""

    TOOL = "tool"
    RESOURCE = "resource"
    PROMPT = "prompt"


CAPABILITY_KINDS = frozenset(kind.value for kind in CapabilityKind)

RegisterFn = Callable[[Any], Union[None, Awaitable[None]]]


@dataclass(frozen=True)
class CapabilityUnit:
    """
    Descriptor exported by every capability module as ``capability``.

    ``register(host)`` is called once at startup and makes exactly one
    registration call on the host.
    """

    kind: CapabilityKind
    name: str
    register: RegisterFn
    description: Optional[str] = None


def is_capability_unit(value: Any) -> bool:
    """Structural check: known kind, textual name, callable register."""
    if value is None:
        return False
    kind = getattr(value, "kind", None)
    kind_value = kind.value if isinstance(kind, CapabilityKind) else kind
    return (
        isinstance(kind_value, str)
        and kind_value in CAPABILITY_KINDS
        and isinstance(getattr(value, "name", None), str)
        and callable(getattr(value, "register", None))
    )


def kind_label(kind: Any) -> str:
    return kind.value if isinstance(kind, CapabilityKind) else str(kind)
