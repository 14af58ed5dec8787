"""Loader for section-based tile map definitions."""
from .data_model import (Map, EnemyGroup, NPC, StatBlock, Effect, Direction,
                         Stationary, Waypoints, Wander)
from .context import LoadContext
from .errors import (MapError, MapFormatError, MapNotFoundError, Severity,
                     Diagnostic, LoadResult)
from .events import Event, EventComponent, ComponentType
from .parser import MapParser, load_map, parse_map_text
