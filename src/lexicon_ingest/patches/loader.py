"""
YAML loader for patch tables.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..exceptions import PatchTableError
from .schema import PatchStep, PatchTable, normalize_headword

DEFAULT_TABLE_PATH = Path(__file__).with_name("table.yaml")


def load_patch_table(
    source: Union[str, Path, Dict[str, Any]],
) -> PatchTable:
    """Load a patch table from a YAML file, YAML string or dictionary.

    Args:
        source: Path to YAML file, YAML string, or parsed dictionary

    Returns:
        PatchTable object

    Raises:
        PatchTableError: If the content cannot be parsed or has the wrong shape
        FileNotFoundError: If the file does not exist
    """
    source_path: Optional[Path] = None

    if isinstance(source, dict):
        data = source
    elif isinstance(source, Path) or (isinstance(source, str) and _is_file_path(source)):
        source_path = Path(source)
        if not source_path.exists():
            raise FileNotFoundError(f"File not found: {source_path}")
        data = _load_yaml_file(source_path)
    else:
        # Assume it's a YAML string
        data = _load_yaml_string(source)

    return _parse_patch_table(data, source_path)


def default_patch_table() -> PatchTable:
    """The table of known defects shipped with the package."""
    return load_patch_table(DEFAULT_TABLE_PATH)


def _is_file_path(s: str) -> bool:
    """Check if a string looks like a file path."""
    if "\n" in s:
        return False
    if "/" in s or "\\" in s:
        return True
    if s.endswith((".yaml", ".yml")):
        return True
    return False


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load YAML from a file."""
    with open(path, "r", encoding="utf-8") as f:
        return _load_yaml_string(f.read())


def _load_yaml_string(s: str) -> Dict[str, Any]:
    """Load YAML from a string."""
    try:
        data = yaml.safe_load(s)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line_num = mark.line + 1 if mark else None
        raise PatchTableError(f"Invalid YAML: {e}", line=line_num) from e

    if data is None:
        raise PatchTableError("Empty YAML content")
    if not isinstance(data, dict):
        raise PatchTableError("YAML root must be a mapping (dictionary)")

    return data


def _parse_patch_table(
    data: Dict[str, Any],
    source_path: Optional[Path] = None,
) -> PatchTable:
    """Parse a dictionary into a PatchTable object."""
    description = data.get("description")
    if description is not None and not isinstance(description, str):
        raise PatchTableError("Field 'description' must be a string")

    patches = data.get("patches")
    if patches is None:
        raise PatchTableError("Missing required field: 'patches'")
    if not isinstance(patches, dict):
        raise PatchTableError("Field 'patches' must be a mapping of headword to steps")

    rules: Dict[str, List[PatchStep]] = {}
    for headword, steps_data in patches.items():
        if not isinstance(headword, str) or not headword.strip():
            raise PatchTableError(f"Invalid headword key: {headword!r}")
        key = normalize_headword(headword)
        rules.setdefault(key, []).extend(_parse_steps(headword, steps_data))

    return PatchTable(rules=rules, description=description, source_file=source_path)


def _parse_steps(headword: str, steps_data: Any) -> List[PatchStep]:
    """Parse the step list of one headword.

    A step is either an operation name or a mapping with an 'operation'
    key plus its parameters.
    """
    if isinstance(steps_data, str):
        steps_data = [steps_data]
    if not isinstance(steps_data, list) or not steps_data:
        raise PatchTableError(f"'{headword}': steps must be a non-empty list")

    steps = []
    for i, step_data in enumerate(steps_data):
        if isinstance(step_data, str):
            steps.append(PatchStep(operation=step_data))
            continue
        if not isinstance(step_data, dict):
            raise PatchTableError(
                f"'{headword}' step #{i + 1} must be a string or a mapping"
            )

        operation = step_data.get("operation")
        if not operation:
            raise PatchTableError(
                f"'{headword}' step #{i + 1}: Missing required field 'operation'"
            )
        if not isinstance(operation, str):
            raise PatchTableError(
                f"'{headword}' step #{i + 1}: Field 'operation' must be a string"
            )

        params = {k: v for k, v in step_data.items() if k != "operation"}
        steps.append(PatchStep(operation=operation, params=params))

    return steps


def dump_patch_table(table: PatchTable) -> str:
    """Serialise a table back to YAML."""
    patches: Dict[str, List[Any]] = {}
    for headword, steps in table.rules.items():
        patches[headword] = [
            {"operation": s.operation, **s.params} if s.params else s.operation
            for s in steps
        ]

    data: Dict[str, Any] = {}
    if table.description:
        data["description"] = table.description
    data["patches"] = patches
    return yaml.safe_dump(data, allow_unicode=True, sort_keys=False)
