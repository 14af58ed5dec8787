"""Injected collaborators for map loading: logger and string table."""
import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Union

DEFAULT_LOGGER = logging.getLogger('flaremap')

StringTable = Union[Mapping[str, str], Callable[[str], str]]


@dataclass
class LoadContext:
    """
    Collaborators shared by the section loaders.

    Args:
        logger: receives advisories, repairs and fatal errors
        strings: localized string lookup, either a mapping or a callable;
            unknown keys pass through untranslated
        strict: promote advisories (unknown keys, bad directions) to
            fatal MapFormatError
    """
    logger: logging.Logger = DEFAULT_LOGGER
    strings: Optional[StringTable] = None
    strict: bool = False

    def translate(self, text: str) -> str:
        if self.strings is None:
            return text
        if callable(self.strings):
            return self.strings(text)
        return self.strings.get(text, text)
