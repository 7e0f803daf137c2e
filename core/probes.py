"""Conflict probes run by the cascade.

Each probe returns a ConflictRecord when its signal fires and None
otherwise. Commands go through an injected runner so that nonzero exits
are data, not exceptions; only a runner that cannot start the manager
raises (ProbeError), and the cascade handles that.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

from .detect import is_manifest_file
from .errors import ManifestError
from .managers import TreeFormat
from .models import ConflictKind, ConflictRecord
from .parse_node import find_version_conflicts, read_manifest
from .runner import CommandRunner

logger = logging.getLogger(__name__)

RESOLUTION_ERROR_CODE = "ERESOLVE"
PEER_WARNING_TERMS = ("peer dep missing", "conflict")
WARNING_LINE_PATTERN = re.compile(
    r"ERESOLVE|peer dep missing|conflict|invalid|required|unmet", re.IGNORECASE
)

CACHE_DIRECTORY = "node_modules"
DEDUPE_TRIGGERS = ("duplicate", "deduped")
DUPLICATE_TOKEN_PATTERN = re.compile(r"([a-zA-Z0-9@/-]+)@(\d+\.\d+\.\d+)")
DEDUPE_FALLBACK_MESSAGE = "Detected duplicate packages that could be deduped"


def inspect_tree(
    runner: CommandRunner, tree_format: TreeFormat, cwd: Path, source_file: str
) -> ConflictRecord | None:
    """Look for reported problems and invalid nodes in the dependency tree."""
    result = runner(tree_format.list_command(), cwd, merge_stderr=tree_format.merge_stderr)

    try:
        data = tree_format.load(result.stdout)
    except ValueError as e:
        logger.warning("Could not parse %s ls output: %s", tree_format.name, e)
        return None

    # Top-level problems win over anything found in the tree walk
    problems = tree_format.extract_problems(data)
    if problems:
        return ConflictRecord(
            kind=ConflictKind.NPM_DEPENDENCY_CONFLICT,
            problems=tuple(problems),
            source_file=source_file,
        )

    invalid = tree_format.extract_invalid(data)
    if invalid:
        return ConflictRecord(
            kind=ConflictKind.INVALID_DEPENDENCIES,
            problems=tuple(invalid),
            source_file=source_file,
        )

    return None


def _is_peer_warning(warning: Any) -> bool:
    if isinstance(warning, dict):
        if warning.get("code") == RESOLUTION_ERROR_CODE:
            return True
        text = warning.get("message")
    else:
        text = warning

    if not isinstance(text, str):
        return False
    lowered = text.lower()
    return any(term in lowered for term in PEER_WARNING_TERMS)


def _warning_text(warning: Any) -> str:
    if isinstance(warning, str):
        return warning
    if isinstance(warning, dict) and warning.get("message"):
        return str(warning["message"])
    return json.dumps(warning, sort_keys=True)


def scan_warning_lines(output: str) -> list[str]:
    """Return the output lines that mention a resolution problem."""
    return [line for line in output.split("\n") if WARNING_LINE_PATTERN.search(line)]


def probe_dry_run(
    runner: CommandRunner, tree_format: TreeFormat, cwd: Path, source_file: str
) -> ConflictRecord | None:
    """Dry-run an install and pick out peer dependency warnings."""
    result = runner(tree_format.install_dry_run_command(), cwd)

    try:
        data = json.loads(result.stdout)
    except ValueError:
        logger.debug("%s dry-run output is not JSON, scanning text", tree_format.name)
        lines = scan_warning_lines(result.stdout)
        if lines:
            return ConflictRecord(
                kind=ConflictKind.DEPENDENCY_WARNING,
                problems=tuple(lines),
                source_file=source_file,
            )
        return None

    warnings = data.get("warnings") if isinstance(data, dict) else None
    if not isinstance(warnings, list):
        return None

    matched = [_warning_text(w) for w in warnings if _is_peer_warning(w)]
    if matched:
        return ConflictRecord(
            kind=ConflictKind.PEER_DEPENDENCY_CONFLICT,
            problems=tuple(matched),
            source_file=source_file,
        )
    return None


def check_manifests(paths: list[str], cwd: Path) -> ConflictRecord | None:
    """Cross-reference versions across the sections of each changed package.json."""
    for path in paths:
        if not is_manifest_file(path):
            continue

        try:
            manifest = read_manifest(cwd / path)
        except ManifestError as e:
            logger.warning("Could not parse %s: %s", path, e)
            continue

        problems = find_version_conflicts(manifest)
        if problems:
            return ConflictRecord(
                kind=ConflictKind.VERSION_CONFLICT,
                problems=tuple(problems),
                source_file=path,
            )

    return None


def probe_duplicates(
    runner: CommandRunner, tree_format: TreeFormat, cwd: Path
) -> ConflictRecord | None:
    """Ask the manager which installed packages a dedupe would collapse."""
    if not (cwd / CACHE_DIRECTORY).is_dir():
        return None

    result = runner(tree_format.dedupe_command(), cwd, merge_stderr=True)
    output = result.stdout + result.stderr

    if not any(trigger in output for trigger in DEDUPE_TRIGGERS):
        return None

    tokens = [f"{name}@{version}" for name, version in DUPLICATE_TOKEN_PATTERN.findall(output)]
    return ConflictRecord(
        kind=ConflictKind.DUPLICATE_PACKAGES,
        problems=tuple(tokens) if tokens else (DEDUPE_FALLBACK_MESSAGE,),
        source_file=CACHE_DIRECTORY,
    )
