"""
julia_atlas/registry/dependents.py — Reverse dependencies read from the registry.

The registry records what each release *requires*; the graph builder asks
the opposite question, "who depends on P?". RegistryDependentsSource answers
it by inverting every requires file once, on first use.
"""

import logging

from julia_atlas.config import DEFAULT_CONFIG, AtlasConfig
from julia_atlas.registry.scanner import PackageIndex, package_dir
from julia_atlas.registry.versions import latest_version, list_versions, read_requires

logger = logging.getLogger(__name__)


class RegistryDependentsSource:
    """
    DependentsSource backed by the requires files of a registry checkout.

    C is a dependent of P when a considered release of C lists P in its
    requires file. config.dependents_scope chooses between every release
    ("all_versions") and the latest one only ("latest"). The platform entry
    (config.platform_package) is never treated as a package.
    """

    def __init__(
        self,
        registry_dir: str,
        index: PackageIndex,
        config: AtlasConfig = DEFAULT_CONFIG,
    ) -> None:
        self.registry_dir = registry_dir
        self.index = index
        self.config = config
        self._reverse: dict[str, set[str]] | None = None

    def _releases(self, pkg_dir: str) -> list[str]:
        versions = list_versions(pkg_dir) or []
        if self.config.dependents_scope == "latest":
            latest = latest_version(versions, self.config.version_ordering)
            return [latest] if latest else []
        return versions

    def _build_reverse_map(self) -> dict[str, set[str]]:
        reverse: dict[str, set[str]] = {}
        for name in self.index:
            pkg_dir = package_dir(self.registry_dir, name)
            for version in self._releases(pkg_dir):
                try:
                    requires = read_requires(pkg_dir, version)
                except (OSError, UnicodeDecodeError) as exc:
                    logger.warning(
                        "Unreadable requires for %s %s: %s", name, version, exc
                    )
                    continue
                if not requires:
                    continue
                for dependency in requires:
                    if dependency == self.config.platform_package:
                        continue
                    reverse.setdefault(dependency, set()).add(name)

        logger.info(
            "Inverted requires files: %d packages have at least one dependent.",
            len(reverse),
        )
        return reverse

    def dependents(self, name: str) -> list[str]:
        """Sorted names of the packages that depend on `name`."""
        if self._reverse is None:
            self._reverse = self._build_reverse_map()
        return sorted(self._reverse.get(name, ()))
