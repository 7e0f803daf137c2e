"""Core data models for DepGuard."""

from dataclasses import dataclass, field
from enum import Enum


class ConflictKind(str, Enum):
    """Kinds of dependency hazard the cascade can report."""

    NPM_DEPENDENCY_CONFLICT = "npm_dependency_conflict"
    INVALID_DEPENDENCIES = "invalid_dependencies"
    PEER_DEPENDENCY_CONFLICT = "peer_dependency_conflict"
    DEPENDENCY_WARNING = "dependency_warning"
    VERSION_CONFLICT = "version_conflict"
    DUPLICATE_PACKAGES = "duplicate_packages"

    @property
    def title(self) -> str:
        """Human-friendly name used in reports."""
        return _TITLES[self]


_TITLES = {
    ConflictKind.NPM_DEPENDENCY_CONFLICT: "NPM Dependency Conflict",
    ConflictKind.INVALID_DEPENDENCIES: "Invalid Dependencies",
    ConflictKind.PEER_DEPENDENCY_CONFLICT: "Peer Dependency Conflict",
    ConflictKind.DEPENDENCY_WARNING: "Dependency Warning",
    ConflictKind.VERSION_CONFLICT: "Version Conflict",
    ConflictKind.DUPLICATE_PACKAGES: "Duplicate Packages",
}


@dataclass
class ManifestEntry:
    """A single dependency entry in a manifest file."""

    name: str
    spec: str
    section: str = "dependencies"  # dependencies, devDependencies, peerDependencies, optionalDependencies


@dataclass
class Manifest:
    """A parsed dependency manifest."""

    ecosystem: str  # node
    raw: str
    entries: list[ManifestEntry]


@dataclass(frozen=True)
class VersionEntry:
    """A normalized version of a package as declared in one section."""

    section: str
    version: str


@dataclass(frozen=True)
class ConflictRecord:
    """The single conflict reported by the cascade."""

    kind: ConflictKind
    problems: tuple[str, ...]
    source_file: str

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "title": self.kind.title,
            "problems": list(self.problems),
            "source_file": self.source_file,
        }


@dataclass(frozen=True)
class AdvisoryResult:
    """Explanation and remediation steps derived from a model response."""

    explanation: str
    steps: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {"explanation": self.explanation, "steps": list(self.steps)}


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of a package manager invocation."""

    returncode: int
    stdout: str
    stderr: str = ""
