"""
Line tokenizer for section-based definition files.

    # comment
    [section]
    key=value,value,...

Yields (section, key, val) tokens one at a time and flags the first token of
every section occurrence, so that repeatable sections can be told apart.
Bulk data that is not key=value shaped is read with get_raw_line().
"""
import logging
import re
from pathlib import Path
from typing import Callable, List, Optional

from flaremap.data_model import Direction
from flaremap.errors import MapFormatError, MapNotFoundError

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r'\s*([+-]?\d+)')

DIRECTION_NAMES = {d.name: int(d) for d in Direction}


# ── Value helpers ─────────────────────────────────────────────────────


def to_int(s, default=0):
    """Parse the leading integer of s; default when there is none."""
    m = _LEADING_INT.match(s or '')
    if m is None:
        return default
    return int(m.group(1))


def to_bool(s):
    return (s or '').strip().lower() in ('true', 'yes', '1')


def parse_direction(val):
    """
    Parse a compass token (N, NE, E, ...) or an integer 0-7.

    Raises:
        ValueError: numeric direction outside 0-7
    """
    val = (val or '').strip()
    if val.upper() in DIRECTION_NAMES:
        return DIRECTION_NAMES[val.upper()]
    d = to_int(val)
    if d < 0 or d > 7:
        raise ValueError(f"Direction '{d}' is not within range 0-7.")
    return d


def read_list(infile):
    """Pop values off the current line until an empty one is reached."""
    values = []
    s = infile.next_value()
    while s:
        values.append(s)
        s = infile.next_value()
    return values


# ── Token source ──────────────────────────────────────────────────────


class FileParser:
    """
    Token source over a definition file.

    Usage:
        infile = FileParser()
        infile.open('maps/level.txt')
        while infile.next():
            if infile.new_section: ...
            handle(infile.section, infile.key, infile.val)
        infile.close()
    """

    def __init__(self, on_error: Optional[Callable[[str], None]] = None):
        self.filename = ''
        self.section = ''
        self.key = ''
        self.val = ''
        self.new_section = False
        self.line_number = 0
        self._lines: List[str] = []
        self._pos = 0
        self._on_error = on_error

    def open(self, path):
        path = Path(path)
        if not path.is_file():
            raise MapNotFoundError(str(path))
        try:
            text = path.read_text(encoding='utf-8')
        except UnicodeDecodeError as e:
            raise MapFormatError(f"Map: File is not valid UTF-8 ({e.reason} at byte {e.start}).",
                                 filename=str(path)) from e
        return self.open_text(text, str(path))

    def open_text(self, text, filename='<string>'):
        self.filename = filename
        self._lines = text.splitlines()
        self._pos = 0
        self.line_number = 0
        self.section = ''
        self.key = ''
        self.val = ''
        self.new_section = False
        return self

    def close(self):
        self._lines = []
        self._pos = 0

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def next(self):
        """Advance to the next key=value token. Returns False at end of file."""
        self.new_section = False
        while self._pos < len(self._lines):
            line = self._lines[self._pos].strip()
            self._pos += 1
            self.line_number += 1

            if not line or line.startswith('#'):
                continue

            if line.startswith('['):
                if not line.endswith(']'):
                    self.error("'%s' is not a valid section header.", line)
                    continue
                self.section = line[1:-1].strip()
                self.new_section = True
                continue

            if '=' not in line:
                self.error("'%s' is not a valid key=value pair.", line)
                continue

            key, val = line.split('=', 1)
            self.key = key.strip()
            self.val = val.strip()
            return True
        return False

    def next_value(self):
        """Pop the next comma separated value off val; '' when exhausted."""
        if not self.val:
            return ''
        head, sep, rest = self.val.partition(',')
        self.val = rest.strip() if sep else ''
        return head.strip()

    def get_raw_line(self):
        """Return the next physical line untokenized; '' at end of file."""
        if self._pos >= len(self._lines):
            return ''
        line = self._lines[self._pos].strip()
        self._pos += 1
        return line

    def increment_line_num(self):
        self.line_number += 1

    def error(self, message, *args):
        """
        Report a problem at the current line.

        The error hook receives the bare message and can read filename and
        line_number off the parser; without a hook the line-numbered text
        is logged as a warning.
        """
        if args:
            message = message % args
        if self._on_error is not None:
            self._on_error(message)
        else:
            logger.warning("%s:%d: %s", self.filename, self.line_number, message)
        return message
