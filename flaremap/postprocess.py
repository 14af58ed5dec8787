"""
Post-load pass: synthesizes the data a map file never states explicitly.

- a StatBlock for every event that casts a power
- a collision layer, if the file did not declare one
"""
from typing import List

from flaremap.data_model import (
    Map, StatBlock, Effect, COLLISION_LAYER, MAP_EVENT_ACCURACY,
    MAP_EVENT_IMMUNITY, INDEFINITE_DURATION, tile_center,
)
from flaremap.errors import Diagnostic, MapFormatError, Severity


def build_event_statblock(event) -> StatBlock:
    """StatBlock used as the caster of a power event."""
    statb = StatBlock(accuracy=MAP_EVENT_ACCURACY)

    path = event.power_path()
    if path is not None:
        statb.pos = tile_center(path.x, path.y)
    else:
        statb.pos = tile_center(event.location[0], event.location[1])

    damage = event.power_damage()
    if damage is not None:
        statb.dmg_melee_min = statb.dmg_ranged_min = statb.dmg_ment_min = damage.a
        statb.dmg_melee_max = statb.dmg_ranged_max = statb.dmg_ment_max = damage.b

    # cooldown ticks for the map power; the power itself is looked up by the event
    statb.power_cooldowns = [0]

    # keeps damage-return bonuses and debuffs from affecting the caster
    statb.effects.append(Effect(id=MAP_EVENT_IMMUNITY, type='immunity',
                                duration=INDEFINITE_DURATION))
    return statb


def create_event_statblocks(map_def: Map) -> int:
    """Attach a StatBlock to every power event. Returns the number created."""
    created = 0
    for event in map_def.events:
        if event.power() is None:
            continue
        map_def.statblocks.append(build_event_statblock(event))
        event.statblock_index = len(map_def.statblocks) - 1
        created += 1
    return created


def ensure_collision_layer(map_def: Map) -> bool:
    """Append an empty collision layer if none exists. Returns True if added."""
    if COLLISION_LAYER in map_def.layernames:
        if map_def.collision_layer < 0:
            map_def.collision_layer = map_def.layernames.index(COLLISION_LAYER)
        return False
    map_def.collision_layer = map_def.add_layer(COLLISION_LAYER)
    return True


def check_layer_shapes(map_def: Map):
    """Every layer must cover exactly w x h tiles."""
    for name, grid in zip(map_def.layernames, map_def.layers):
        if grid.shape != (map_def.h, map_def.w):
            raise MapFormatError(
                f"Map: Layer '{name}' is {grid.shape[1]}x{grid.shape[0]}, "
                f"expected {map_def.w}x{map_def.h}.",
                filename=map_def.filename)


def finalize_map(map_def: Map) -> List[Diagnostic]:
    """Run the post-load pass. Returns the repairs it made."""
    repairs = []
    check_layer_shapes(map_def)
    create_event_statblocks(map_def)
    if ensure_collision_layer(map_def):
        repairs.append(Diagnostic(
            Severity.REPAIR,
            "Map: No collision layer found. Creating an empty one.",
            filename=map_def.filename))
    return repairs
