"""
HOMESERVER Synology Plex Updater
Copyright (C) 2024 HOMESERVER LLC

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""

"""
Version normalization and comparison.

Plex labels its builds as "<version>-<build hash>", for example
"1.32.8.7639-fb6452ebf". Everything from the first '-' onward is build
metadata and never takes part in the comparison.
"""

import functools
import re
from typing import Tuple, Union

from packaging.version import Version

from ..errors import VersionParseError

BUILD_METADATA_SEPARATOR = "-"

# Leading numeric component, then dot separated alphanumeric components
_VERSION_PATTERN = re.compile(r'^v?(\d+(?:\.[0-9A-Za-z]+)*)$')

NUMERIC, ALPHANUMERIC = 0, 1
_ZERO = (NUMERIC, 0)


@functools.total_ordering
class VersionTag:
    """
    Comparable form of a version string with build metadata removed.

    Components are compared one by one, with missing trailing components
    treated as zero. Numeric components compare numerically, others compare
    lexically, and any numeric component sorts before an alphanumeric one so
    the ordering stays total. Pre-release words like "a" or "rc" carry no
    special meaning.
    """

    def __init__(self, text: str):
        match = _VERSION_PATTERN.match(text)
        if not match:
            raise VersionParseError(f"invalid version: {text!r}")
        self.text = match.group(1)
        self.components = tuple(self.text.split('.'))

        if all(c.isdigit() for c in self.components):
            key = [(NUMERIC, n) for n in Version(self.text).release]
        else:
            key = [(NUMERIC, int(c)) if c.isdigit() else (ALPHANUMERIC, c)
                   for c in self.components]
        while len(key) > 1 and key[-1] == _ZERO:
            key.pop()
        self._key: Tuple[Tuple[int, Union[int, str]], ...] = tuple(key)

    def _compare(self, other: "VersionTag") -> int:
        length = max(len(self._key), len(other._key))
        mine = self._key + (_ZERO,) * (length - len(self._key))
        theirs = other._key + (_ZERO,) * (length - len(other._key))
        if mine < theirs:
            return -1
        return 1 if mine > theirs else 0

    def __eq__(self, other):
        if not isinstance(other, VersionTag):
            return NotImplemented
        return self._key == other._key

    def __lt__(self, other):
        if not isinstance(other, VersionTag):
            return NotImplemented
        return self._compare(other) < 0

    def __hash__(self):
        return hash(self._key)

    def __str__(self):
        return self.text

    def __repr__(self):
        return f"VersionTag({self.text!r})"


def normalize(raw: str) -> VersionTag:
    """
    Strip build metadata from a version label and parse what remains.

    Args:
        raw: Version label such as "1.32.7.7621-871adbd44"

    Returns:
        VersionTag: Comparable version

    Raises:
        VersionParseError: If the remainder is not a version
    """
    if not isinstance(raw, str):
        raise VersionParseError(f"invalid version: {raw!r}")
    text = raw.strip().split(BUILD_METADATA_SEPARATOR, 1)[0].strip()
    return VersionTag(text)


def compare(a: VersionTag, b: VersionTag) -> int:
    """Return -1 if a < b, 0 if equal, 1 if a > b."""
    return a._compare(b)


def compare_versions(version1: str, version2: str) -> int:
    """
    Compare two raw version labels, ignoring build metadata.

    Returns:
        int: -1 if version1 < version2, 0 if equal, 1 if version1 > version2
    """
    return compare(normalize(version1), normalize(version2))
