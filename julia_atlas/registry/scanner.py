"""
julia_atlas/registry/scanner.py — Package enumeration and id allocation.

The registry checkout holds one directory per package:

    METADATA/
        Example/
            url                 git://github.com/JuliaLang/Example.jl.git
            versions/
                0.4.0/requires  julia 0.4
                0.5.1/requires  julia 0.5

scan_registry() lists those directories and hands back an immutable
PackageIndex: names in sorted order, ids allocated 0..n-1 in that order.
The index is the only place ids come from, so ids are stable within a run
and identical across runs over the same checkout.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from julia_atlas.config import DEFAULT_CONFIG, AtlasConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageIndex:
    """Immutable name ↔ id mapping for one run."""

    names: tuple[str, ...]
    _ids: dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_ids", {name: i for i, name in enumerate(self.names)})

    @classmethod
    def from_names(cls, names) -> "PackageIndex":
        """Allocate ids in the order the names are given. Duplicates are dropped."""
        ordered: list[str] = []
        seen: set[str] = set()
        for name in names:
            if name in seen:
                continue
            seen.add(name)
            ordered.append(name)
        return cls(names=tuple(ordered))

    def id_of(self, name: str) -> int:
        """Raises KeyError for a name that was not scanned."""
        return self._ids[name]

    def name_of(self, package_id: int) -> str:
        return self.names[package_id]

    def get(self, name: str) -> Optional[int]:
        return self._ids.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._ids

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self):
        return iter(self.names)


def _is_package_entry(registry_dir: str, entry: str, reserved: set[str]) -> bool:
    if entry in reserved or entry.startswith("."):
        return False
    return os.path.isdir(os.path.join(registry_dir, entry))


def scan_registry(
    registry_dir: str | None = None,
    config: AtlasConfig = DEFAULT_CONFIG,
) -> PackageIndex:
    """
    Enumerate package directories in a registry checkout.

    Args:
        registry_dir: Registry root. Defaults to config.registry_dir.
        config:       AtlasConfig. Uses config.reserved_names.

    Returns:
        PackageIndex with names sorted and ids assigned in that order.

    Raises:
        FileNotFoundError / NotADirectoryError / PermissionError: the registry
        root cannot be listed. A run without a registry cannot proceed.
    """
    registry_dir = registry_dir or config.registry_dir
    logger.info("Scanning registry: %s", registry_dir)

    entries = os.listdir(registry_dir)
    reserved = set(config.reserved_names)
    names = sorted(e for e in entries if _is_package_entry(registry_dir, e, reserved))

    skipped = len(entries) - len(names)
    if skipped:
        logger.debug("Ignored %d reserved or non-package entries.", skipped)

    index = PackageIndex.from_names(names)
    logger.info("Found %d packages.", len(index))
    return index


def package_dir(registry_dir: str, name: str) -> str:
    return os.path.join(registry_dir, name)


def read_repo_url(pkg_dir: str) -> Optional[str]:
    """
    Read the repository URL recorded for a package.

    Returns the first non-blank line of <pkg_dir>/url, or None when the file
    is missing, unreadable or empty.
    """
    path = os.path.join(pkg_dir, "url")
    try:
        with open(path, encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if line:
                    return line
    except FileNotFoundError:
        logger.warning("No url file for package at %s", pkg_dir)
        return None
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return None

    logger.warning("Empty url file: %s", path)
    return None
