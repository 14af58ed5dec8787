"""Shared test fixtures and constants for flaremap tests."""
import os

from flaremap.parser import MapParser

DATA_DIR = os.path.join(os.path.dirname(__file__), 'data')
CAVE_MAP = os.path.join(DATA_DIR, 'cave.txt')


def make_map_text(width=2, height=2, layers=None, sections=''):
    """
    Build map text with a header and the given layers.

    Args:
        layers: list of (name, rows) where rows is a list of raw data lines
        sections: extra section text appended verbatim
    """
    lines = ['[header]', f'width={width}', f'height={height}', '']
    for name, rows in layers or []:
        lines += ['[layer]', f'type={name}', 'format=dec', 'data=']
        lines += list(rows)
        lines.append('')
    return '\n'.join(lines) + '\n' + sections


def load_text(text, context=None):
    """Parse map text, returning the LoadResult."""
    return MapParser(context).load_text(text, 'test.txt')
