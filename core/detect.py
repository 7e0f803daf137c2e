"""Package manager detection and dependency file matching."""

from pathlib import Path

MANIFEST_FILENAME = "package.json"

DEPENDENCY_FILENAMES = (
    MANIFEST_FILENAME,
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
)

# Checked in priority order; npm is the fallback.
LOCKFILE_MANAGERS = (
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
)


def select_manager(cwd: str | Path = ".") -> str:
    """Detect the active package manager from lockfiles.

    Args:
        cwd: Project directory to inspect

    Returns:
        Detected manager: 'pnpm', 'yarn', or 'npm'
    """
    root = Path(cwd)
    for lockfile, manager in LOCKFILE_MANAGERS:
        if (root / lockfile).exists():
            return manager
    return "npm"


def is_dependency_file(path: str) -> bool:
    """Check whether a changed path is a manifest or lockfile."""
    return path.endswith(DEPENDENCY_FILENAMES)


def is_manifest_file(path: str) -> bool:
    return path.endswith(MANIFEST_FILENAME)


def filter_dependency_files(paths: list[str]) -> list[str]:
    """Return the manifest-like paths, preserving their order."""
    return [path for path in paths if is_dependency_file(path)]
