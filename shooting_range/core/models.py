"""Targets, games and distance markers as stored and consumed by the controller."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from .paths import target_image_path


@dataclass
class Target:
    node_id: int
    distance: float
    image_num: int
    id: Optional[int] = None

    @property
    def image_path(self) -> Path:
        return target_image_path(self.image_num)


def _check_window(start_time: int, end_time: int) -> None:
    if start_time < 0 or end_time < 0:
        raise ValueError("window times must be non-negative")
    if start_time >= end_time:
        raise ValueError(f"start_time ({start_time}) must be < end_time ({end_time})")


@dataclass
class GameTargetInput:
    """A window as submitted for storage: references a target by its row id."""
    target_id: int
    start_time: int
    end_time: int

    def __post_init__(self):
        _check_window(self.start_time, self.end_time)


@dataclass
class GameTarget:
    """An activation window: ``target`` is shown during [start_time, end_time) seconds."""
    target: Target
    start_time: int
    end_time: int
    id: Optional[int] = None

    def __post_init__(self):
        _check_window(self.start_time, self.end_time)

    def is_active(self, elapsed_s: int) -> bool:
        return self.start_time <= elapsed_s < self.end_time


@dataclass
class Game:
    name: str
    total_time: int
    targets: list[GameTarget] = field(default_factory=list)
    id: Optional[int] = None

    def __post_init__(self):
        self.targets = sorted(self.targets, key=lambda gt: gt.start_time)

    @property
    def node_ids(self) -> set[int]:
        return {gt.target.node_id for gt in self.targets}


@dataclass
class DistanceMarker:
    marker_number: int
    distance: float
    id: Optional[int] = None


def validate_game(total_time: int, windows: Iterable[GameTargetInput]) -> None:
    """Raise ValueError unless every window ends within ``total_time``."""
    if total_time < 0:
        raise ValueError("total_time must be >= 0")
    latest = max((w.end_time for w in windows), default=0)
    if latest > total_time:
        raise ValueError(f"total_time ({total_time}) is shorter than the last window end ({latest})")
