"""Errors and load diagnostics."""
import enum
from dataclasses import dataclass, field
from typing import List


class Severity(enum.Enum):
    FATAL = 'fatal'          # load aborted
    REPAIR = 'repair'        # invariant restored automatically
    ADVISORY = 'advisory'    # value discarded, load continues


@dataclass
class Diagnostic:
    severity: Severity
    message: str
    filename: str = ''
    line_number: int = 0
    key: str = ''

    def __str__(self):
        if self.filename and self.line_number:
            return f"{self.filename}:{self.line_number}: {self.message}"
        if self.filename:
            return f"{self.filename}: {self.message}"
        return self.message


class MapError(Exception):
    """Base class for map loading errors."""


class MapNotFoundError(MapError, FileNotFoundError):
    def __init__(self, filename):
        super().__init__(f"Map file not found: {filename}")
        self.filename = filename


class MapFormatError(MapError):
    """A fatal format or validation error; no usable map is produced."""

    def __init__(self, message, filename='', line_number=0, key=''):
        self.diagnostic = Diagnostic(Severity.FATAL, message, filename,
                                     line_number, key)
        super().__init__(str(self.diagnostic))
        self.message = message
        self.filename = filename
        self.line_number = line_number
        self.key = key


@dataclass
class LoadResult:
    map: object                                   # data_model.Map
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def repairs(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.REPAIR]

    @property
    def advisories(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ADVISORY]
