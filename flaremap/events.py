"""
Scripted map events: one Event per [event] section, made of an ordered list
of tagged components.
"""
import enum
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from flaremap.tokenizer import read_list, to_bool, to_int

MAX_FRAMES_PER_SEC = 60


class ComponentType(enum.Enum):
    POWER = 'power'
    POWER_PATH = 'power_path'
    POWER_DAMAGE = 'power_damage'
    REQUIRES_STATUS = 'requires_status'
    REQUIRES_NOT_STATUS = 'requires_not_status'
    REQUIRES_ITEM = 'requires_item'
    SET_STATUS = 'set_status'
    UNSET_STATUS = 'unset_status'
    REMOVE_ITEM = 'remove_item'
    REWARD_XP = 'reward_xp'
    REWARD_CURRENCY = 'reward_currency'
    MSG = 'msg'
    SOUNDFX = 'soundfx'
    INTERMAP = 'intermap'
    MAPMOD = 'mapmod'
    LOOT = 'loot'
    NPC = 'npc'
    MUSIC = 'music'
    CUTSCENE = 'cutscene'
    SHAKYCAM = 'shakycam'
    SPAWN = 'spawn'
    REPEAT = 'repeat'


ACTIVATE_TYPES = (
    'on_trigger', 'on_interact', 'on_mapexit', 'on_leave',
    'on_load', 'on_clear', 'static',
)


@dataclass
class EventComponent:
    type: ComponentType
    s: str = ''
    x: int = 0
    y: int = 0
    z: int = 0
    a: int = 0
    b: int = 0


Rect = Tuple[int, int, int, int]


@dataclass
class Event:
    type: str = ''
    activate: str = 'on_trigger'
    location: Rect = (0, 0, 1, 1)
    hotspot: Optional[Rect] = None
    cooldown: int = 0             # ticks
    tooltip: str = ''
    keep_after_trigger: bool = True
    components: List[EventComponent] = field(default_factory=list)
    statblock_index: Optional[int] = None

    def find_component(self, kind: ComponentType) -> Optional[EventComponent]:
        """First component of the given kind, or None."""
        for ec in self.components:
            if ec.type == kind:
                return ec
        return None

    def find_components(self, kind: ComponentType) -> List[EventComponent]:
        return [ec for ec in self.components if ec.type == kind]

    def power(self) -> Optional[EventComponent]:
        return self.find_component(ComponentType.POWER)

    def power_path(self) -> Optional[EventComponent]:
        return self.find_component(ComponentType.POWER_PATH)

    def power_damage(self) -> Optional[EventComponent]:
        return self.find_component(ComponentType.POWER_DAMAGE)


def parse_duration(val):
    """'500ms' / '2s' / plain ticks -> ticks."""
    val = val.strip().lower()
    if val.endswith('ms'):
        return max(0, to_int(val[:-2]) * MAX_FRAMES_PER_SEC // 1000)
    if val.endswith('s'):
        return max(0, to_int(val[:-1]) * MAX_FRAMES_PER_SEC)
    return max(0, to_int(val))


def _read_rect(infile, default_size=1):
    x = to_int(infile.next_value())
    y = to_int(infile.next_value())
    w = to_int(infile.next_value(), default_size)
    h = to_int(infile.next_value(), default_size)
    return (x, y, w, h)


# Keys producing one component per comma separated string value
_STRING_LIST_KEYS = {
    'requires_status': ComponentType.REQUIRES_STATUS,
    'requires_not_status': ComponentType.REQUIRES_NOT_STATUS,
    'set_status': ComponentType.SET_STATUS,
    'unset_status': ComponentType.UNSET_STATUS,
}

# Keys producing one component per comma separated integer value
_INT_LIST_KEYS = {
    'requires_item': ComponentType.REQUIRES_ITEM,
    'remove_item': ComponentType.REMOVE_ITEM,
}

# Keys producing a single component holding one file or id string
_STRING_KEYS = {
    'npc': ComponentType.NPC,
    'music': ComponentType.MUSIC,
    'cutscene': ComponentType.CUTSCENE,
}

# Keys producing a single component holding one integer in x
_INT_KEYS = {
    'power': ComponentType.POWER,
    'reward_xp': ComponentType.REWARD_XP,
    'reward_currency': ComponentType.REWARD_CURRENCY,
    'shakycam': ComponentType.SHAKYCAM,
}


def _load_component(infile, event, translate):
    """Parse a component key into event.components. Returns False if unknown."""
    key = infile.key
    add = event.components.append

    if key in _STRING_LIST_KEYS:
        for s in read_list(infile):
            add(EventComponent(_STRING_LIST_KEYS[key], s=s))
    elif key in _INT_LIST_KEYS:
        for s in read_list(infile):
            add(EventComponent(_INT_LIST_KEYS[key], x=to_int(s)))
    elif key in _STRING_KEYS:
        add(EventComponent(_STRING_KEYS[key], s=infile.val))
    elif key in _INT_KEYS:
        add(EventComponent(_INT_KEYS[key], x=to_int(infile.next_value())))
    elif key == 'power_path':
        ec = EventComponent(ComponentType.POWER_PATH)
        ec.x = to_int(infile.next_value())
        ec.y = to_int(infile.next_value())
        target = infile.next_value()
        if target == 'hero':
            ec.s = 'hero'
        else:
            ec.a = to_int(target)
            ec.b = to_int(infile.next_value())
        add(ec)
    elif key == 'power_damage':
        ec = EventComponent(ComponentType.POWER_DAMAGE)
        ec.a = to_int(infile.next_value())
        ec.b = to_int(infile.next_value(), ec.a)
        add(ec)
    elif key == 'msg':
        add(EventComponent(ComponentType.MSG, s=translate(infile.val)))
    elif key == 'soundfx':
        ec = EventComponent(ComponentType.SOUNDFX, s=infile.next_value())
        ec.x = to_int(infile.next_value(), -1)
        ec.y = to_int(infile.next_value(), -1)
        add(ec)
    elif key == 'intermap':
        ec = EventComponent(ComponentType.INTERMAP, s=infile.next_value())
        ec.x = to_int(infile.next_value(), -1)
        ec.y = to_int(infile.next_value(), -1)
        add(ec)
    elif key == 'mapmod':
        # layer,x,y,tile repeated once per modified tile
        layer = infile.next_value()
        while layer:
            ec = EventComponent(ComponentType.MAPMOD, s=layer)
            ec.x = to_int(infile.next_value())
            ec.y = to_int(infile.next_value())
            ec.z = to_int(infile.next_value())
            add(ec)
            layer = infile.next_value()
    elif key == 'loot':
        ec = EventComponent(ComponentType.LOOT, s=infile.next_value())
        ec.x = to_int(infile.next_value())
        ec.y = to_int(infile.next_value())
        ec.a = max(1, to_int(infile.next_value(), 1))
        ec.b = max(ec.a, to_int(infile.next_value(), ec.a))
        add(ec)
    elif key == 'spawn':
        category = infile.next_value()
        while category:
            ec = EventComponent(ComponentType.SPAWN, s=category)
            ec.x = to_int(infile.next_value())
            ec.y = to_int(infile.next_value())
            add(ec)
            category = infile.next_value()
    elif key == 'repeat':
        add(EventComponent(ComponentType.REPEAT, x=int(to_bool(infile.val))))
    else:
        return False
    return True


def load_event(infile, event: Event,
               translate: Optional[Callable[[str], str]] = None):
    """Apply the current key of an [event] section to event."""
    if translate is None:
        translate = str
    key = infile.key

    if key == 'type':
        event.type = infile.val
    elif key == 'activate':
        if infile.val in ACTIVATE_TYPES:
            event.activate = infile.val
        else:
            infile.error("EventManager: Event activation type '%s' unknown.",
                         infile.val)
    elif key == 'location':
        event.location = _read_rect(infile)
    elif key == 'hotspot':
        if infile.val == 'location':
            event.hotspot = event.location
        else:
            event.hotspot = _read_rect(infile)
    elif key == 'cooldown':
        event.cooldown = parse_duration(infile.val)
    elif key == 'tooltip':
        event.tooltip = translate(infile.val)
    elif key == 'keep_after_trigger':
        event.keep_after_trigger = to_bool(infile.val)
    elif not _load_component(infile, event, translate):
        infile.error("EventManager: '%s' is not a valid key.", key)
