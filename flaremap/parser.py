"""
Map definition parser: reads section-based map files and produces a Map.

    [header]          scalar metadata
    [layer]           one tile grid; data= is followed by h raw rows
    [enemy]           one spawn group per occurrence
    [npc]             one NPC placement per occurrence
    [event]           one scripted event per occurrence

Unknown sections are skipped so newer map files still load.
"""
from pathlib import Path

from flaremap.context import LoadContext
from flaremap.data_model import (
    Map, EnemyGroup, NPC, Stationary, Waypoints, Wander,
    BLOCKS_NONE, BLOCKS_MOVEMENT_HIDDEN, COLLISION_LAYER, LAYER_FORMAT,
    tile_center,
)
from flaremap.errors import (
    Diagnostic, LoadResult, MapFormatError, Severity,
)
from flaremap.events import Event, load_event
from flaremap.postprocess import finalize_map
from flaremap.tokenizer import FileParser, parse_direction, read_list, to_int

TILE_MAX = 0xFFFF

# Repeatable sections → (Map attribute, element factory)
REPEATABLE_SECTIONS = {
    'enemy': ('enemy_groups', EnemyGroup),
    'npc': ('npcs', NPC),
    'event': ('events', Event),
}

# Header keys written by external map editors and not used at runtime
IGNORED_HEADER_KEYS = ('tilewidth', 'tileheight', 'orientation')


def _read_range(infile):
    """'min[,max]' → (min, max), both ≥ 0 and max ≥ min."""
    lo = max(0, to_int(infile.next_value()))
    hi = max(0, to_int(infile.next_value(), lo))
    return lo, max(lo, hi)


class MapParser:
    """
    Loads map files into Map instances.

    Usage:
        parser = MapParser(LoadContext(strings=translations))
        result = parser.load('maps/cave.txt')
        result.map.layers, result.repairs, result.advisories

    Raises MapNotFoundError for missing files and MapFormatError for fatal
    format errors; repairs and advisories are collected on the LoadResult.
    """

    def __init__(self, context=None):
        self.context = context or LoadContext()
        self.map = None
        self.diagnostics = []
        self._infile = None
        self._active = {}
        self._active_layer = -1

    # ── Entry points ──────────────────────────────────────────────────

    def load(self, path, map_def=None) -> LoadResult:
        infile = FileParser(on_error=self._advise)
        infile.open(path)
        return self._run(infile, map_def)

    def load_text(self, text, filename='<string>', map_def=None) -> LoadResult:
        infile = FileParser(on_error=self._advise)
        infile.open_text(text, filename)
        return self._run(infile, map_def)

    def _run(self, infile, map_def):
        self.map = map_def if map_def is not None else Map()
        self.map.clear()
        self.map.filename = infile.filename
        self.diagnostics = []
        self._infile = infile
        self._active = {section: -1 for section in REPEATABLE_SECTIONS}
        self._active_layer = -1

        log = self.context.logger
        log.debug("Loading map %s", infile.filename)
        try:
            with infile:
                self._dispatch(infile)
            for repair in finalize_map(self.map):
                self._report(repair)
        except MapFormatError as e:
            log.error("%s", e)
            raise
        finally:
            self._infile = None

        m = self.map
        log.info("Loaded map %s: %dx%d, %d layers, %d enemy groups, "
                 "%d npcs, %d events", m.filename, m.w, m.h, len(m.layers),
                 len(m.enemy_groups), len(m.npcs), len(m.events))
        return LoadResult(map=m, diagnostics=list(self.diagnostics))

    # ── Diagnostics ───────────────────────────────────────────────────

    def _report(self, diagnostic):
        self.diagnostics.append(diagnostic)
        self.context.logger.warning("%s", diagnostic)

    def _advise(self, message):
        """FileParser error hook: non-fatal problems at the current line."""
        infile = self._infile
        diagnostic = Diagnostic(Severity.ADVISORY, message, infile.filename,
                                infile.line_number, infile.key)
        if self.context.strict:
            raise MapFormatError(message, infile.filename,
                                 infile.line_number, infile.key)
        self._report(diagnostic)

    def _repair(self, message):
        infile = self._infile
        self._report(Diagnostic(Severity.REPAIR, message, infile.filename,
                                infile.line_number, infile.key))

    def _fatal(self, infile, message):
        raise MapFormatError(message, infile.filename, infile.line_number,
                             infile.key)

    # ── Section dispatcher ────────────────────────────────────────────

    def _dispatch(self, infile):
        while infile.next():
            section = infile.section
            if infile.new_section and section in REPEATABLE_SECTIONS:
                attr, factory = REPEATABLE_SECTIONS[section]
                collection = getattr(self.map, attr)
                collection.append(factory())
                self._active[section] = len(collection) - 1

            if section == 'header':
                self._load_header(infile)
            elif section == 'layer':
                self._load_layer(infile)
            elif section == 'enemy':
                self._load_enemy_group(infile, self._current('enemy'))
            elif section == 'npc':
                self._load_npc(infile, self._current('npc'))
            elif section == 'event':
                load_event(infile, self._current('event'),
                           self.context.translate)

    def _current(self, section):
        attr, _ = REPEATABLE_SECTIONS[section]
        return getattr(self.map, attr)[self._active[section]]

    # ── Section loaders ───────────────────────────────────────────────

    def _read_direction(self, infile, val):
        try:
            return parse_direction(val)
        except ValueError as e:
            infile.error("%s", e)
            return 0

    def _load_header(self, infile):
        m = self.map
        key = infile.key
        if key == 'title':
            m.title = self.context.translate(infile.val)
        elif key == 'width':
            self._resize(infile, max(to_int(infile.val), 1), m.h)
        elif key == 'height':
            self._resize(infile, m.w, max(to_int(infile.val), 1))
        elif key == 'tileset':
            m.tileset = infile.val
        elif key == 'music':
            m.music = infile.val
        elif key == 'location':
            x = to_int(infile.next_value())
            y = to_int(infile.next_value())
            m.spawn = tile_center(x, y)
            m.spawn_dir = self._read_direction(infile, infile.next_value())
        elif key in IGNORED_HEADER_KEYS:
            pass
        else:
            infile.error("Map: '%s' is not a valid key.", key)

    def _resize(self, infile, w, h):
        m = self.map
        if m.layers and (w, h) != (m.w, m.h):
            self._fatal(infile, f"Map: Size changed to {w}x{h} after a layer was declared.")
        m.w, m.h = w, h

    def _load_layer(self, infile):
        m = self.map
        key = infile.key
        if key == 'type':
            self._active_layer = m.add_layer(infile.val)
            if infile.val == COLLISION_LAYER:
                m.collision_layer = self._active_layer
        elif key == 'format':
            if infile.val != LAYER_FORMAT:
                self._fatal(infile, f'Map: The format of a layer must be "{LAYER_FORMAT}"!')
        elif key == 'data':
            if self._active_layer < 0:
                self._fatal(infile, "Map: Layer data found before the layer type.")
            grid = m.layers[self._active_layer]
            for j in range(m.h):
                val = infile.get_raw_line()
                infile.increment_line_num()
                if val and not val.endswith(','):
                    val += ','
                if val.count(',') != m.w:
                    self._fatal(infile, f"Map: A row of layer data has a width not equal to {m.w}.")
                row = [to_int(v) for v in val.split(',')[:m.w]]
                grid[j, :] = [min(max(v, 0), TILE_MAX) for v in row]
        else:
            infile.error("Map: '%s' is not a valid key.", key)

    def _load_enemy_group(self, infile, group):
        key = infile.key
        if key == 'type':
            group.type = infile.val
        elif key == 'category':
            group.category = infile.val
        elif key == 'level':
            group.levelmin, group.levelmax = _read_range(infile)
        elif key == 'location':
            x = to_int(infile.next_value())
            y = to_int(infile.next_value())
            group.pos = (x, y)
            w = to_int(infile.next_value())
            h = to_int(infile.next_value())
            group.area = (w, h)
        elif key == 'number':
            group.numbermin, group.numbermax = _read_range(infile)
        elif key == 'chance':
            n = max(0, to_int(infile.next_value())) / 100.0
            group.chance = min(1.0, max(0.0, n))
        elif key == 'direction':
            group.direction = self._read_direction(infile, infile.val)
        elif key == 'waypoints':
            points = group.waypoints
            a = infile.next_value()
            b = infile.next_value()
            while a:
                points.append(tile_center(to_int(a), to_int(b)))
                a = infile.next_value()
                b = infile.next_value()
            # replaces any wander radius
            group.movement = Waypoints(tuple(points)) if points else Stationary()
        elif key == 'wander_radius':
            # replaces any waypoints
            group.movement = Wander(max(0, to_int(infile.next_value())))
        elif key == 'requires_status':
            group.requires_status.extend(read_list(infile))
        elif key == 'requires_not_status':
            group.requires_not_status.extend(read_list(infile))
        else:
            infile.error("Map: '%s' is not a valid key.", key)

    def _load_npc(self, infile, npc):
        key = infile.key
        if key == 'type':
            npc.type = infile.val
        elif key == 'filename':
            npc.id = infile.val
        elif key == 'requires_status':
            npc.requires_status.extend(read_list(infile))
        elif key == 'requires_not_status':
            npc.requires_not_status.extend(read_list(infile))
        elif key == 'location':
            x = to_int(infile.next_value())
            y = to_int(infile.next_value())
            npc.pos = tile_center(x, y)
            self._block_npc_tile(x, y)
        else:
            infile.error("Map: '%s' is not a valid key.", key)

    def _block_npc_tile(self, x, y):
        # NPC tiles must block movement; standing inside an NPC retriggers it
        m = self.map
        collision = m.collision
        # negative tile coordinates are off the map, not truncated onto tile 0
        if collision is None or not m.in_bounds(x, y):
            return
        if collision[y, x] == BLOCKS_NONE:
            self._repair(f"Map: NPC at ({x}, {y}) does not have a collision tile. "
                         "Creating one now.")
            collision[y, x] = BLOCKS_MOVEMENT_HIDDEN


# ── Main entry points ─────────────────────────────────────────────────


def load_map(path, context=None) -> Map:
    """
    Load a map file.

    Args:
        path: map definition file
        context: optional LoadContext (logger, string table, strict mode)

    Returns:
        Map

    Raises:
        MapNotFoundError: path does not exist
        MapFormatError: the file is malformed beyond repair
    """
    return MapParser(context).load(Path(path)).map


def parse_map_text(text, filename='<string>', context=None) -> Map:
    """Parse map definition text into a Map."""
    return MapParser(context).load_text(text, filename).map
