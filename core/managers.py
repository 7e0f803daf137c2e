"""Package manager command lines and dependency tree output formats."""

import json
import re
from typing import Any

_PEER_WARNING = re.compile(r"(unmet|incorrect) peer dependency", re.IGNORECASE)


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value, sort_keys=True)


def _text_list(value: Any) -> list[str]:
    """Coerce an optional JSON array into a list of strings."""
    if not isinstance(value, list):
        return []
    return [_as_text(item) for item in value]


def walk_invalid(deps: Any, child_keys: tuple[str, ...] = ("dependencies",)) -> list[str]:
    """Collect invalid nodes and node-level problems from a dependency map.

    Args:
        deps: Mapping of package name to tree node
        child_keys: Node keys holding nested dependency maps

    Returns:
        "name@version" for each invalid node plus each node's own problems,
        in depth-first order
    """
    results: list[str] = []
    if not isinstance(deps, dict):
        return results

    for key, node in deps.items():
        if not isinstance(node, dict):
            continue
        # npm 6 marks invalid nodes with true, npm 7+ with a reason string
        if node.get("invalid"):
            results.append(f"{node.get('name') or key}@{node.get('version', '')}")
        results.extend(_text_list(node.get("problems")))
        for child_key in child_keys:
            results.extend(walk_invalid(node.get(child_key), child_keys))

    return results


class TreeFormat:
    """Commands and list output of a package manager.

    The base implementation speaks npm's commands and JSON shape;
    subclasses override what their manager does differently.
    """

    name = "npm"
    # Whether the list command reports problems on stderr
    merge_stderr = False

    def list_command(self) -> list[str]:
        return [self.name, "ls", "--json"]

    def install_dry_run_command(self) -> list[str]:
        return [self.name, "install", "--dry-run", "--json"]

    def dedupe_command(self) -> list[str]:
        return ["npm", "dedupe", "--dry-run"]

    def load(self, output: str) -> Any:
        """Parse list command output.

        Raises:
            ValueError: If the output is not valid JSON
        """
        return json.loads(output)

    def extract_problems(self, data: Any) -> list[str]:
        if not isinstance(data, dict):
            return []
        return _text_list(data.get("problems"))

    def extract_invalid(self, data: Any) -> list[str]:
        if not isinstance(data, dict):
            return []
        return walk_invalid(data.get("dependencies"))


class NpmTreeFormat(TreeFormat):
    """`npm ls --json` output: a single root object."""

    name = "npm"


class PnpmTreeFormat(TreeFormat):
    """`pnpm ls --json` output: one object per workspace project."""

    name = "pnpm"
    project_sections = ("dependencies", "devDependencies", "optionalDependencies")

    def dedupe_command(self) -> list[str]:
        return ["pnpm", "dedupe", "--check"]

    def _projects(self, data: Any) -> list[dict]:
        if isinstance(data, dict):
            return [data]
        if isinstance(data, list):
            return [project for project in data if isinstance(project, dict)]
        return []

    def extract_problems(self, data: Any) -> list[str]:
        problems = []
        for project in self._projects(data):
            problems.extend(_text_list(project.get("problems")))
        return problems

    def extract_invalid(self, data: Any) -> list[str]:
        results = []
        for project in self._projects(data):
            for section in self.project_sections:
                results.extend(walk_invalid(project.get(section)))
        return results


class YarnTreeFormat(TreeFormat):
    """`yarn list --json` output: newline-delimited JSON records."""

    name = "yarn"
    # warning and error records go to stderr, only the tree record to stdout
    merge_stderr = True

    def list_command(self) -> list[str]:
        return ["yarn", "list", "--json"]

    def load(self, output: str) -> list[dict]:
        records = []
        for line in output.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(record, dict):
                records.append(record)

        if not records:
            raise ValueError("No JSON records in yarn output")
        return records

    def _messages(self, data: Any, record_type: str) -> list[str]:
        if not isinstance(data, list):
            return []
        return [
            _as_text(record.get("data"))
            for record in data
            if isinstance(record, dict) and record.get("type") == record_type
        ]

    def extract_problems(self, data: Any) -> list[str]:
        return self._messages(data, "error")

    def extract_invalid(self, data: Any) -> list[str]:
        return [w for w in self._messages(data, "warning") if _PEER_WARNING.search(w)]


_FORMATS = {
    "npm": NpmTreeFormat,
    "pnpm": PnpmTreeFormat,
    "yarn": YarnTreeFormat,
}


def get_tree_format(manager: str) -> TreeFormat:
    """Return the output format for a manager name, defaulting to npm."""
    return _FORMATS.get(manager, NpmTreeFormat)()
