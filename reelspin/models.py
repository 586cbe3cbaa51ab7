"""
Value objects passed through a spin.

Machine definitions are read-only and shared by every spin; grids, storage and
results are created per spin and handed back to the caller.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

Number = Union[int, float]


@dataclass(frozen=True)
class WildSymbol:
    index: int


@dataclass(frozen=True)
class FreeSpinCondition:
    count: int
    total: int
    multiply: Optional[Number] = None  # None means "not configured", 0 is a real multiplier


@dataclass(frozen=True)
class FreeSpinRule:
    index: int
    conditions: List[FreeSpinCondition] = field(default_factory=list)

    def condition_for(self, count: int) -> Optional[FreeSpinCondition]:
        """First condition whose count matches exactly, or None."""
        return next((c for c in self.conditions if c.count == count), None)


@dataclass(frozen=True)
class MachineConfig:
    reels: List[List[int]]
    rows: int
    lines: List[List[int]]
    prize_table: Dict[int, List[Number]]
    wild: Optional[WildSymbol] = None
    free_spin: Optional[FreeSpinRule] = None
    name: Optional[str] = None
    description: Optional[str] = None

    @property
    def num_reels(self) -> int:
        return len(self.reels)

    @property
    def wild_index(self) -> Optional[int]:
        return self.wild.index if self.wild is not None else None

    @property
    def free_spin_index(self) -> Optional[int]:
        return self.free_spin.index if self.free_spin is not None else None


@dataclass
class FreeSpinState:
    multiplier: Number = 1
    symbols: int = 0
    total: int = 0


@dataclass(frozen=True)
class Grid:
    symbols: List[List[int]]
    free_spin: FreeSpinState = field(default_factory=FreeSpinState)


@dataclass
class Storage:
    free_spin: Optional[FreeSpinState] = None


@dataclass
class LineWin:
    index: int
    combo: int
    prize: Number
    wc: int
    ss: List[int]


@dataclass
class SpinResult:
    prize: Number = 0
    lines: List[LineWin] = field(default_factory=list)
    exit_storage: Storage = field(default_factory=Storage)
