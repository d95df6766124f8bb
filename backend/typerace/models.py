import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DEFAULT_PLAYER_NAME = 'Anon'


@dataclass
class PlayerState:
    name: str = DEFAULT_PLAYER_NAME
    progress: float = 0
    wpm: float = 0
    accuracy: float = 0
    ready: bool = False
    finished: bool = False

    @classmethod
    def fresh(cls, name: Optional[str]) -> 'PlayerState':
        return cls(name=name or DEFAULT_PLAYER_NAME)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'progress': self.progress,
            'wpm': self.wpm,
            'accuracy': self.accuracy,
            'ready': self.ready,
            'finished': self.finished,
        }


@dataclass
class Room:
    """In-memory race session.

    ``order`` lists member ids in join order and always holds exactly the keys
    of ``players``; host failover picks from it rather than from dict order.
    """
    text: str
    players: Dict[str, PlayerState] = field(default_factory=dict)
    order: List[str] = field(default_factory=list)
    host: Optional[str] = None
    race_start: Optional[int] = None
    finished_players: List[str] = field(default_factory=list)

    def add_player(self, sid: str, player: PlayerState) -> None:
        if sid not in self.players:
            self.order.append(sid)
        self.players[sid] = player

    def remove_player(self, sid: str) -> None:
        self.players.pop(sid, None)
        if sid in self.order:
            self.order.remove(sid)
        self.unmark_finished(sid)

    def mark_finished(self, sid: str) -> None:
        if sid not in self.finished_players:
            self.finished_players.append(sid)

    def unmark_finished(self, sid: str) -> None:
        self.finished_players = [p for p in self.finished_players if p != sid]

    def earliest_member(self) -> Optional[str]:
        return self.order[0] if self.order else None

    def all_finished(self) -> bool:
        return bool(self.players) and all(p.finished for p in self.players.values())

    @property
    def racing(self) -> bool:
        return self.race_start is not None

    def copy(self) -> 'Room':
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Canonical ``room:state`` snapshot."""
        return {
            'text': self.text,
            'players': {sid: self.players[sid].to_dict() for sid in self.order},
            'host': self.host,
            'raceStart': self.race_start,
            'finishedPlayers': list(self.finished_players),
        }
