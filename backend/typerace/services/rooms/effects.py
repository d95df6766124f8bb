"""Outbound effects produced by a room transition, applied in order by the dispatcher."""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class Broadcast:
    room: str
    event: str
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Direct:
    sid: str
    event: str
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Subscribe:
    room: str
    sid: str


@dataclass(frozen=True)
class Unsubscribe:
    room: str
    sid: str


@dataclass(frozen=True)
class CloseChannel:
    room: str
