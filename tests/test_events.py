import pytest

from flaremap.context import LoadContext
from flaremap.events import ComponentType, Event, EventComponent, parse_duration
from flaremap.parser import parse_map_text
from conftest import load_text


def _event(body, context=None):
    m = parse_map_text("[event]\n" + body, context=context)
    assert len(m.events) == 1
    return m.events[0]


def test_event_fields():
    e = _event("type=door\nactivate=on_interact\nlocation=3,4,2,1\n"
               "hotspot=location\ncooldown=2s\ntooltip=Door\n"
               "keep_after_trigger=false\n")
    assert e.type == 'door'
    assert e.activate == 'on_interact'
    assert e.location == (3, 4, 2, 1)
    assert e.hotspot == (3, 4, 2, 1)
    assert e.cooldown == 120
    assert e.tooltip == 'Door'
    assert e.keep_after_trigger is False


def test_location_size_defaults_to_one_tile():
    assert _event("location=5,6\n").location == (5, 6, 1, 1)


def test_explicit_hotspot():
    assert _event("hotspot=1,2,3,4\n").hotspot == (1, 2, 3, 4)


def test_unknown_activation_is_advisory():
    result = load_text("[event]\nactivate=on_sneeze\n")
    assert result.map.events[0].activate == 'on_trigger'
    assert len(result.advisories) == 1


@pytest.mark.parametrize('value, ticks', [('30', 30), ('500ms', 30), ('1s', 60), ('-3', 0)])
def test_parse_duration(value, ticks):
    assert parse_duration(value) == ticks


def test_power_components():
    e = _event("power=12\npower_path=1,2,hero\npower_damage=5,9\n")
    assert e.power().x == 12
    path = e.power_path()
    assert (path.x, path.y, path.s) == (1, 2, 'hero')
    damage = e.power_damage()
    assert (damage.a, damage.b) == (5, 9)


def test_power_path_with_target():
    path = _event("power_path=1,2,7,8\n").power_path()
    assert (path.x, path.y, path.a, path.b, path.s) == (1, 2, 7, 8, '')


def test_power_damage_single_value():
    damage = _event("power_damage=4\n").power_damage()
    assert (damage.a, damage.b) == (4, 4)


def test_status_components_one_per_value():
    e = _event("requires_status=a,b\nset_status=c\nunset_status=d,e\n")
    assert [c.s for c in e.find_components(ComponentType.REQUIRES_STATUS)] == ['a', 'b']
    assert [c.s for c in e.find_components(ComponentType.SET_STATUS)] == ['c']
    assert [c.s for c in e.find_components(ComponentType.UNSET_STATUS)] == ['d', 'e']


def test_item_components():
    e = _event("requires_item=3,4\nremove_item=3\n")
    assert [c.x for c in e.find_components(ComponentType.REQUIRES_ITEM)] == [3, 4]
    assert e.find_component(ComponentType.REMOVE_ITEM).x == 3


def test_components_keep_file_order():
    e = _event("msg=Hello\nsoundfx=sfx/door.ogg\nintermap=maps/b.txt,4,5\nshakycam=30\n")
    assert [c.type for c in e.components] == [
        ComponentType.MSG, ComponentType.SOUNDFX,
        ComponentType.INTERMAP, ComponentType.SHAKYCAM,
    ]
    intermap = e.find_component(ComponentType.INTERMAP)
    assert (intermap.s, intermap.x, intermap.y) == ('maps/b.txt', 4, 5)
    assert e.find_component(ComponentType.SOUNDFX).x == -1


def test_mapmod_and_spawn_lists():
    e = _event("mapmod=collision,1,2,0,object,1,2,35\nspawn=goblin,3,4,wolf,5,6\n")
    mods = e.find_components(ComponentType.MAPMOD)
    assert [(c.s, c.x, c.y, c.z) for c in mods] == [
        ('collision', 1, 2, 0), ('object', 1, 2, 35)]
    spawns = e.find_components(ComponentType.SPAWN)
    assert [(c.s, c.x, c.y) for c in spawns] == [('goblin', 3, 4), ('wolf', 5, 6)]


def test_loot_quantity_range():
    loot = _event("loot=currency,2,3,5,10\n").find_component(ComponentType.LOOT)
    assert (loot.s, loot.x, loot.y, loot.a, loot.b) == ('currency', 2, 3, 5, 10)
    loot = _event("loot=1001,2,3\n").find_component(ComponentType.LOOT)
    assert (loot.a, loot.b) == (1, 1)


def test_string_and_flag_components():
    e = _event("npc=npcs/a.txt\nmusic=music/b.ogg\ncutscene=c.txt\nrepeat=true\n"
               "reward_xp=100\nreward_currency=25\n")
    assert e.find_component(ComponentType.NPC).s == 'npcs/a.txt'
    assert e.find_component(ComponentType.MUSIC).s == 'music/b.ogg'
    assert e.find_component(ComponentType.CUTSCENE).s == 'c.txt'
    assert e.find_component(ComponentType.REPEAT).x == 1
    assert e.find_component(ComponentType.REWARD_XP).x == 100
    assert e.find_component(ComponentType.REWARD_CURRENCY).x == 25


def test_msg_and_tooltip_translated():
    ctx = LoadContext(strings={'Hello': 'Bonjour', 'Door': 'Porte'})
    e = _event("msg=Hello\ntooltip=Door\n", context=ctx)
    assert e.find_component(ComponentType.MSG).s == 'Bonjour'
    assert e.tooltip == 'Porte'


def test_find_component_missing():
    e = Event(components=[EventComponent(ComponentType.MSG, s='x')])
    assert e.find_component(ComponentType.POWER) is None
    assert e.power() is None
    assert e.find_components(ComponentType.POWER) == []


def test_unknown_event_key_is_advisory():
    result = load_text("[event]\ntype=e\nexplode=yes\n")
    [adv] = result.advisories
    assert adv.key == 'explode'
