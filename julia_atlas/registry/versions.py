"""
julia_atlas/registry/versions.py — Latest-version selection and requires parsing.

A requires file lists one requirement per line:

    julia 0.6 0.7-
    Compat 0.33
    @windows WinRPM
    # comment

i.e. a package name followed by zero, one or two version bounds, optionally
prefixed by @platform conditionals. The Julia line gives the interval of
language versions the release supports; read_julia_version() turns that
into a VersionConstraint with sentinel values when it cannot be found.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Optional

from packaging.version import InvalidVersion, Version

from julia_atlas.config import BOGUS, DEFAULT_CONFIG, NA, UNBOUNDED, AtlasConfig

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(.*)$")
_NOT_A_VERSION = Version("0")


@dataclass(frozen=True)
class VersionConstraint:
    """Julia version interval of a package's latest release."""

    min: str
    max: str
    majorminor: str

    @classmethod
    def na(cls) -> "VersionConstraint":
        return cls(NA, NA, NA)

    @classmethod
    def bogus(cls) -> "VersionConstraint":
        return cls(BOGUS, BOGUS, BOGUS)

    def to_dict(self) -> dict[str, str]:
        return {"min": self.min, "max": self.max, "majorminor": self.majorminor}


def version_key(name: str) -> tuple:
    """
    Sort key comparing version directory names numerically.

    "0.10.0" sorts after "0.9.3"; a pre-release suffix ("0.7.0-beta") sorts
    before the plain release. Names that are not versions sort first, by
    their text.
    """
    try:
        return (1, Version(name), name)
    except InvalidVersion:
        return (0, _NOT_A_VERSION, name)


def latest_version(names, ordering: str = "semantic") -> Optional[str]:
    """Pick the latest version directory name, or None for no candidates."""
    names = list(names)
    if not names:
        return None
    if ordering == "lexicographic":
        return max(names)
    return max(names, key=version_key)


def list_versions(pkg_dir: str) -> Optional[list[str]]:
    """
    Return the version directory names of a package.

    None means the versions directory itself does not exist; an empty list
    means it exists but holds no versions.
    """
    versions_dir = os.path.join(pkg_dir, "versions")
    if not os.path.isdir(versions_dir):
        return None
    return [
        entry for entry in os.listdir(versions_dir)
        if not entry.startswith(".")
        and os.path.isdir(os.path.join(versions_dir, entry))
    ]


def parse_requires(text: str) -> dict[str, list[str]]:
    """
    Parse a requires file into {package_name: [bounds...]}.

    Comments and @platform conditionals are dropped. When a package appears
    more than once (e.g. under different platform conditionals) the first
    line wins.
    """
    requirements: dict[str, list[str]] = {}
    for raw_line in text.splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if not line:
            continue
        tokens = line.split()
        while tokens and tokens[0].startswith("@"):
            tokens.pop(0)
        if not tokens:
            continue
        name, bounds = tokens[0], tokens[1:]
        requirements.setdefault(name, bounds)
    return requirements


def read_requires(pkg_dir: str, version: str) -> Optional[dict[str, list[str]]]:
    """
    Parsed requires of one release, or None if the file is absent.

    Raises:
        OSError, UnicodeDecodeError: the file exists but cannot be read as UTF-8.
    """
    path = os.path.join(pkg_dir, "versions", version, "requires")
    if not os.path.isfile(path):
        return None
    with open(path, encoding="utf-8") as fh:
        return parse_requires(fh.read())


def normalize_version(bound: str) -> Optional[str]:
    """
    Normalize a bound to major.minor.patch with any suffix kept.

        "0.6"    -> "0.6.0"
        "0.7-"   -> "0.7.0-"
        "1.0.2"  -> "1.0.2"
    """
    match = _VERSION_RE.match(bound)
    if not match:
        return None
    major, minor, patch, suffix = match.groups()
    return f"{int(major)}.{int(minor or 0)}.{int(patch or 0)}{suffix}"


def constraint_from_bounds(bounds: list[str]) -> VersionConstraint:
    """Build a VersionConstraint from the bounds of a requires line."""
    if not bounds:
        # Bare "julia" line: any version.
        return VersionConstraint(min="0.0.0", max=UNBOUNDED, majorminor="0.0")

    low = normalize_version(bounds[0])
    if low is None:
        logger.warning("Unparseable julia lower bound: %r", bounds[0])
        return VersionConstraint.na()

    high = UNBOUNDED
    if len(bounds) > 1:
        high = normalize_version(bounds[1]) or UNBOUNDED

    major, minor = low.split(".")[:2]
    return VersionConstraint(min=low, max=high, majorminor=f"{major}.{minor}")


def read_julia_version(
    pkg_dir: str,
    config: AtlasConfig = DEFAULT_CONFIG,
) -> VersionConstraint:
    """
    Julia version constraint declared by a package's latest release.

    Returns:
        VersionConstraint.bogus() if there is no version metadata at all
        (no versions directory, or an empty one).
        VersionConstraint.na() if the latest release declares no julia
        requirement, has no requires file, or the file is unreadable.
        Otherwise the normalized interval.
    """
    versions = list_versions(pkg_dir)
    if not versions:
        logger.debug("No version metadata under %s", pkg_dir)
        return VersionConstraint.bogus()

    latest = latest_version(versions, config.version_ordering)
    try:
        requires = read_requires(pkg_dir, latest)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Unreadable requires for %s %s: %s", os.path.basename(pkg_dir), latest, exc)
        return VersionConstraint.na()
    if requires is None or config.platform_package not in requires:
        return VersionConstraint.na()

    return constraint_from_bounds(requires[config.platform_package])
