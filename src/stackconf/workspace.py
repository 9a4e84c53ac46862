"""Per-user record of the selected stack for each project."""

import logging
from pathlib import Path
from typing import Optional

import yaml

from .errors import ProjectFileError
from .settings import get_stack_override, get_workspace_file

logger = logging.getLogger(__name__)


def _load_selections(workspace_file: Path) -> dict:
    if not workspace_file.exists():
        return {}

    try:
        data = yaml.safe_load(workspace_file.read_text()) or {}
    except yaml.YAMLError as e:
        raise ProjectFileError(f"Failed to parse {workspace_file}: {e}") from e

    stacks = data.get("stacks") if isinstance(data, dict) else None
    return stacks if isinstance(stacks, dict) else {}


def get_current_stack(project_file: Path) -> str:
    """
    The stack commands default to for ``project_file``.

    STACKCONF_STACK wins, then the recorded selection; an empty string
    means no stack is selected.
    """
    override = get_stack_override()
    if override:
        return override

    selections = _load_selections(get_workspace_file())
    return str(selections.get(str(project_file.resolve()), ""))


def select_stack(project_file: Path, stack: str) -> None:
    """Record ``stack`` as the current stack for ``project_file``."""
    workspace_file = get_workspace_file()
    selections = _load_selections(workspace_file)
    selections[str(project_file.resolve())] = stack

    workspace_file.parent.mkdir(parents=True, exist_ok=True)
    with open(workspace_file, "w") as f:
        yaml.safe_dump({"stacks": selections}, f, default_flow_style=False)

    logger.debug("Selected stack '%s' for %s", stack, project_file)
