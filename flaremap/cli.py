"""
Command line map inspector.

Usage:
    flaremap-inspect maps/cave.txt            # human readable summary
    flaremap-inspect maps/cave.txt --json     # machine readable summary
    flaremap-inspect maps/cave.txt --strict   # unknown keys are fatal
"""
import argparse
import json
import logging
import sys

from flaremap.context import LoadContext
from flaremap.errors import MapFormatError, MapNotFoundError
from flaremap.parser import MapParser

EXIT_OK = 0
EXIT_FORMAT_ERROR = 1
EXIT_NOT_FOUND = 2


def summarize(result):
    """Plain dict describing a LoadResult."""
    m = result.map
    return {
        'filename': m.filename,
        'title': m.title,
        'size': [m.w, m.h],
        'tileset': m.tileset,
        'music': m.music,
        'spawn': list(m.spawn),
        'layers': list(m.layernames),
        'collision_layer': m.collision_layer,
        'enemy_groups': len(m.enemy_groups),
        'npcs': len(m.npcs),
        'events': len(m.events),
        'statblocks': len(m.statblocks),
        'diagnostics': [
            {'severity': d.severity.value, 'message': str(d)}
            for d in result.diagnostics
        ],
    }


def _print_summary(summary):
    print(f"{summary['filename']}: {summary['title'] or '(untitled)'}")
    print(f"  size:        {summary['size'][0]}x{summary['size'][1]}")
    print(f"  layers:      {', '.join(summary['layers'])} "
          f"(collision={summary['collision_layer']})")
    print(f"  enemies:     {summary['enemy_groups']} groups")
    print(f"  npcs:        {summary['npcs']}")
    print(f"  events:      {summary['events']} ({summary['statblocks']} casting powers)")
    for d in summary['diagnostics']:
        print(f"  [{d['severity']}] {d['message']}")


def main(argv=None):
    ap = argparse.ArgumentParser(description="Load a map definition and summarize it.")
    ap.add_argument('path', help="map definition file")
    ap.add_argument('--json', action='store_true', help="print JSON instead of text")
    ap.add_argument('--strict', action='store_true', help="treat unknown keys as fatal")
    ap.add_argument('--verbose', '-v', action='store_true', help="log loader diagnostics")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.ERROR,
                        format='%(levelname)s %(name)s: %(message)s')

    parser = MapParser(LoadContext(strict=args.strict))
    try:
        result = parser.load(args.path)
    except MapNotFoundError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_NOT_FOUND
    except MapFormatError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FORMAT_ERROR

    summary = summarize(result)
    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        _print_summary(summary)
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
