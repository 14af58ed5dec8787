import enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

import numpy as np

# Collision tile values (as stored in the collision layer)
BLOCKS_NONE = 0
BLOCKS_ALL = 1
BLOCKS_MOVEMENT = 2
BLOCKS_ALL_HIDDEN = 3
BLOCKS_MOVEMENT_HIDDEN = 4
MAP_ONLY = 5
MAP_ONLY_ALT = 6

COLLISION_LAYER = 'collision'
LAYER_FORMAT = 'dec'            # only accepted value for layer.format
TILE_DTYPE = np.uint16

# Stat blocks synthesized for power events
MAP_EVENT_ACCURACY = 1000       # always hit the target
MAP_EVENT_IMMUNITY = 'MAP_EVENT_IMMUNITY'
INDEFINITE_DURATION = -1


class Direction(enum.IntEnum):
    SW = 0
    W = 1
    NW = 2
    N = 3
    NE = 4
    E = 5
    SE = 6
    S = 7


Point = Tuple[int, int]
FPoint = Tuple[float, float]


def tile_center(x: int, y: int) -> FPoint:
    return (float(x) + 0.5, float(y) + 0.5)


def new_grid(w: int, h: int) -> np.ndarray:
    """Zeroed tile grid, indexed [y, x]."""
    return np.zeros((h, w), dtype=TILE_DTYPE)


# ── Enemy movement variants ───────────────────────────────────────────


@dataclass(frozen=True)
class Stationary:
    pass


@dataclass(frozen=True)
class Waypoints:
    points: Tuple[FPoint, ...]


@dataclass(frozen=True)
class Wander:
    radius: int


Movement = Union[Stationary, Waypoints, Wander]


# ── Map descriptors ───────────────────────────────────────────────────


@dataclass
class EnemyGroup:
    type: str = ''                # as used by map editors; ignored at runtime
    category: str = ''
    levelmin: int = 0
    levelmax: int = 0
    pos: Point = (0, 0)
    area: Point = (1, 1)
    numbermin: int = 1
    numbermax: int = 1
    chance: float = 1.0
    direction: int = -1           # -1 = random facing
    movement: Movement = field(default_factory=Stationary)
    requires_status: List[str] = field(default_factory=list)
    requires_not_status: List[str] = field(default_factory=list)

    @property
    def waypoints(self) -> List[FPoint]:
        if isinstance(self.movement, Waypoints):
            return list(self.movement.points)
        return []

    @property
    def wander_radius(self) -> int:
        if isinstance(self.movement, Wander):
            return self.movement.radius
        return 0


@dataclass
class NPC:
    type: str = ''
    id: str = ''                  # NPC definition filename
    pos: FPoint = (0.0, 0.0)
    requires_status: List[str] = field(default_factory=list)
    requires_not_status: List[str] = field(default_factory=list)


@dataclass
class Effect:
    id: str
    type: str
    duration: int = INDEFINITE_DURATION


@dataclass
class StatBlock:
    accuracy: int = 0
    dmg_melee_min: int = 0
    dmg_melee_max: int = 0
    dmg_ranged_min: int = 0
    dmg_ranged_max: int = 0
    dmg_ment_min: int = 0
    dmg_ment_max: int = 0
    pos: FPoint = (0.0, 0.0)
    power_cooldowns: List[int] = field(default_factory=list)
    effects: List[Effect] = field(default_factory=list)

    def has_effect(self, effect_id: str) -> bool:
        return any(e.id == effect_id for e in self.effects)


@dataclass
class Map:
    filename: str = ''
    title: str = ''
    tileset: str = ''
    music: str = ''
    w: int = 1
    h: int = 1
    spawn: FPoint = (0.0, 0.0)
    spawn_dir: int = 0
    layers: List[np.ndarray] = field(default_factory=list)
    layernames: List[str] = field(default_factory=list)
    collision_layer: int = -1
    enemy_groups: List[EnemyGroup] = field(default_factory=list)
    npcs: List[NPC] = field(default_factory=list)
    events: list = field(default_factory=list)        # List[Event]
    statblocks: List[StatBlock] = field(default_factory=list)

    def clear(self):
        """Reset to the empty state a load starts from."""
        self.filename = ''
        self.title = ''
        self.tileset = ''
        self.music = ''
        self.w = 1
        self.h = 1
        self.spawn = (0.0, 0.0)
        self.spawn_dir = 0
        self.layers.clear()
        self.layernames.clear()
        self.collision_layer = -1
        self.enemy_groups.clear()
        self.npcs.clear()
        self.events.clear()
        self.statblocks.clear()

    def add_layer(self, name: str, grid: Optional[np.ndarray] = None) -> int:
        if grid is None:
            grid = new_grid(self.w, self.h)
        self.layers.append(grid)
        self.layernames.append(name)
        return len(self.layers) - 1

    def remove_layer(self, index: int):
        del self.layernames[index]
        del self.layers[index]
        if self.collision_layer == index:
            self.collision_layer = -1
        elif self.collision_layer > index:
            self.collision_layer -= 1

    def layer(self, name: str) -> np.ndarray:
        try:
            return self.layers[self.layernames.index(name)]
        except ValueError:
            raise KeyError(f"Unknown layer: {name}") from None

    @property
    def collision(self) -> Optional[np.ndarray]:
        if self.collision_layer < 0:
            return None
        return self.layers[self.collision_layer]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.w and 0 <= y < self.h

    def tile_at(self, layer_index: int, x: int, y: int) -> int:
        return int(self.layers[layer_index][y, x])

    def statblock_for(self, event) -> Optional[StatBlock]:
        if event.statblock_index is None:
            return None
        return self.statblocks[event.statblock_index]
