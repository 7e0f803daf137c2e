"""Node.js package.json parsing and version cross-referencing."""

import json
import re
from pathlib import Path

from .errors import ManifestError
from .models import Manifest, ManifestEntry, VersionEntry

DEPENDENCY_SECTIONS = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
)

_RANGE_PREFIX = re.compile(r"^[\^~><=\s]+")


def normalize_version(spec: str) -> str:
    """Strip leading range operators from a version specifier.

    Args:
        spec: Raw specifier such as "^2.0.0" or ">=1.4"

    Returns:
        The bare version, e.g. "2.0.0"
    """
    return _RANGE_PREFIX.sub("", spec).strip()


class PackageJsonParser:
    """Parser for package.json manifests."""

    def __init__(self, sections: tuple[str, ...] = DEPENDENCY_SECTIONS):
        self.sections = sections

    def _load(self, content: str) -> dict:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ManifestError(f"Invalid package.json: {e}") from e

        if not isinstance(data, dict):
            raise ManifestError("Invalid package.json: top level must be an object")
        return data

    def _section_entries(self, data: dict, section: str) -> list[ManifestEntry]:
        deps = data.get(section)
        if not isinstance(deps, dict):
            return []

        return [
            ManifestEntry(name=name, spec=spec, section=section)
            for name, spec in deps.items()
            if isinstance(spec, str)
        ]

    def parse(self, content: str) -> Manifest:
        """Parse package.json content into Manifest."""
        data = self._load(content)
        entries: list[ManifestEntry] = []

        for section in self.sections:
            entries.extend(self._section_entries(data, section))

        return Manifest(ecosystem="node", raw=content, entries=entries)


def parse_package_json(content: str) -> Manifest:
    """Parse package.json content into Manifest.

    Args:
        content: The package.json file content

    Returns:
        Parsed Manifest object

    Raises:
        ManifestError: If the content is not a JSON object
    """
    parser = PackageJsonParser()
    return parser.parse(content)


def read_manifest(path: str | Path) -> Manifest:
    """Read and parse a package.json file from disk."""
    try:
        content = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Could not read {path}: {e}") from e
    return parse_package_json(content)


def build_version_map(manifest: Manifest) -> dict[str, list[VersionEntry]]:
    """Map each package to the normalized versions declared per section.

    Packages keep the order of their first appearance.
    """
    version_map: dict[str, list[VersionEntry]] = {}
    for entry in manifest.entries:
        version_map.setdefault(entry.name, []).append(
            VersionEntry(section=entry.section, version=normalize_version(entry.spec))
        )
    return version_map


def find_version_conflicts(manifest: Manifest) -> list[str]:
    """Report packages declared with diverging versions across sections.

    Args:
        manifest: Parsed package.json manifest

    Returns:
        One problem string per conflicting package, e.g.
        "left-pad has multiple versions: dependencies: 1.0.0, devDependencies: 2.0.0"
    """
    problems = []
    for name, versions in build_version_map(manifest).items():
        if len({v.version for v in versions}) < 2:
            continue
        listing = ", ".join(f"{v.section}: {v.version}" for v in versions)
        problems.append(f"{name} has multiple versions: {listing}")
    return problems
