"""Dependency conflict cascade."""

import logging
from collections.abc import Callable, Sequence
from functools import partial
from pathlib import Path

from .detect import filter_dependency_files, select_manager
from .errors import ProbeError
from .managers import TreeFormat, get_tree_format
from .models import ConflictRecord
from .probes import check_manifests, inspect_tree, probe_dry_run, probe_duplicates
from .runner import DEFAULT_COMMAND_TIMEOUT, CommandRunner, run_command

logger = logging.getLogger(__name__)


class ConflictDetector:
    """Runs the conflict probes in priority order and keeps the first hit.

    The probes are, in order: the manager's dependency tree, an install
    dry-run, cross-referencing versions inside package.json, and a dedupe
    dry-run over node_modules.
    """

    def __init__(
        self,
        cwd: str | Path = ".",
        runner: CommandRunner | None = None,
        command_timeout: float = DEFAULT_COMMAND_TIMEOUT,
    ):
        """Initialize the detector.

        Args:
            cwd: Project directory holding package.json
            runner: Command runner, defaults to a subprocess runner
            command_timeout: Seconds allowed per manager command
        """
        self.cwd = Path(cwd)
        self.runner = runner or partial(run_command, timeout=command_timeout)

    def _checks(
        self, tree_format: TreeFormat, dependency_files: list[str]
    ) -> list[tuple[str, Callable[[], ConflictRecord | None]]]:
        source_file = dependency_files[0]
        return [
            ("tree", partial(inspect_tree, self.runner, tree_format, self.cwd, source_file)),
            ("dry-run", partial(probe_dry_run, self.runner, tree_format, self.cwd, source_file)),
            ("manifest", partial(check_manifests, dependency_files, self.cwd)),
            ("dedupe", partial(probe_duplicates, self.runner, tree_format, self.cwd)),
        ]

    def detect(self, changed_files: Sequence[str]) -> ConflictRecord | None:
        """Detect dependency conflicts for a set of changed files.

        Args:
            changed_files: Paths staged or modified in the commit

        Returns:
            The first conflict found, or None when no dependency file
            changed or no probe fired
        """
        dependency_files = filter_dependency_files(list(changed_files))
        if not dependency_files:
            return None

        manager = select_manager(self.cwd)
        tree_format = get_tree_format(manager)
        logger.info("Checking for dependency conflicts with %s...", manager)

        for name, check in self._checks(tree_format, dependency_files):
            try:
                record = check()
            except ProbeError as e:
                logger.warning("Skipping %s check: %s", name, e)
                continue

            if record is not None:
                logger.info("%s check reported %s", name, record.kind.value)
                return record

        logger.debug("No dependency conflicts found")
        return None


def detect_dependency_conflicts(
    changed_files: Sequence[str], cwd: str | Path = "."
) -> ConflictRecord | None:
    """Detect dependency conflicts using the default subprocess runner."""
    return ConflictDetector(cwd=cwd).detect(changed_files)
