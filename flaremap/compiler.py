"""
Compiler: packs a finished Map into jax arrays for array-based consumers
(collision queries, spawn sampling, batched simulation).
"""
import warnings

import jax.numpy as jnp
import flax.struct
import numpy as np

from flaremap.data_model import Map, BLOCKS_NONE


class OutOfBoundsWarning(UserWarning):
    """A spawn rectangle or NPC lies (partly) outside the map."""


@flax.struct.dataclass
class CompiledMap:
    layers: jnp.ndarray              # [n_layers, h, w] int32
    blocked: jnp.ndarray             # [h, w] bool, collision cell != BLOCKS_NONE
    spawn: jnp.ndarray               # [2] float32 (x, y)
    npc_positions: jnp.ndarray       # [n_npcs, 2] float32
    enemy_rects: jnp.ndarray         # [n_groups, 4] int32 (x, y, w, h)
    enemy_chance: jnp.ndarray        # [n_groups] float32
    enemy_counts: jnp.ndarray        # [n_groups, 2] int32 (min, max)
    statblock_positions: jnp.ndarray # [n_statblocks, 2] float32
    collision_layer: int = flax.struct.field(pytree_node=False, default=0)
    layernames: tuple = flax.struct.field(pytree_node=False, default=())

    def is_blocked(self, x, y):
        """Out-of-bounds tiles count as blocked."""
        h, w = self.blocked.shape
        inside = (x >= 0) & (x < w) & (y >= 0) & (y < h)
        xi = jnp.clip(x, 0, w - 1)
        yi = jnp.clip(y, 0, h - 1)
        return jnp.where(inside, self.blocked[yi, xi], True)


def _rect_in_bounds(x, y, w, h, width, height):
    return x >= 0 and y >= 0 and x + w <= width and y + h <= height


def compile_map(map_def: Map) -> CompiledMap:
    """
    Convert a loaded Map into a CompiledMap.

    The map must have been finalized (collision layer present).
    """
    assert map_def.collision_layer >= 0, "Map has no collision layer; was it loaded?"
    width, height = map_def.w, map_def.h

    layers = jnp.asarray(np.stack(map_def.layers).astype(np.int32))
    blocked = layers[map_def.collision_layer] != BLOCKS_NONE

    npc_positions = np.zeros((len(map_def.npcs), 2), dtype=np.float32)
    for i, npc in enumerate(map_def.npcs):
        npc_positions[i] = npc.pos
        if not map_def.in_bounds(int(npc.pos[0]), int(npc.pos[1])):
            warnings.warn(f"NPC '{npc.id}' at {npc.pos} is outside the "
                          f"{width}x{height} map", OutOfBoundsWarning)

    n_groups = len(map_def.enemy_groups)
    enemy_rects = np.zeros((n_groups, 4), dtype=np.int32)
    enemy_chance = np.zeros((n_groups,), dtype=np.float32)
    enemy_counts = np.zeros((n_groups, 2), dtype=np.int32)
    for i, group in enumerate(map_def.enemy_groups):
        rect = (*group.pos, *group.area)
        enemy_rects[i] = rect
        enemy_chance[i] = group.chance
        enemy_counts[i] = (group.numbermin, group.numbermax)
        if not _rect_in_bounds(*rect, width, height):
            warnings.warn(f"Enemy group '{group.category}' spawn area {rect} "
                          f"exceeds the {width}x{height} map", OutOfBoundsWarning)

    statblock_positions = np.array(
        [sb.pos for sb in map_def.statblocks], dtype=np.float32).reshape(-1, 2)

    return CompiledMap(
        layers=layers,
        blocked=blocked,
        spawn=jnp.array(map_def.spawn, dtype=jnp.float32),
        npc_positions=jnp.asarray(npc_positions),
        enemy_rects=jnp.asarray(enemy_rects),
        enemy_chance=jnp.asarray(enemy_chance),
        enemy_counts=jnp.asarray(enemy_counts),
        statblock_positions=jnp.asarray(statblock_positions),
        collision_layer=map_def.collision_layer,
        layernames=tuple(map_def.layernames),
    )
