"""Loading and saving the project file."""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ProjectFileError, ProjectNotFoundError, StackconfError
from .keys import Key, is_valid_part
from .settings import PROJECT_FILE_NAME, get_project_file_override
from .store import ConfigMap, ConfigStore, StackInfo
from .values import Value

logger = logging.getLogger(__name__)


def find_project_file(start: Optional[Path] = None) -> Path:
    """
    Locate the project file.

    STACKCONF_PROJECT_FILE wins; otherwise walk up from ``start`` (the
    working directory by default) looking for Stackconf.yaml.
    """
    env_file = get_project_file_override()
    if env_file:
        if not env_file.exists():
            raise ProjectNotFoundError(f"Project file not found: {env_file}")
        return env_file

    start = (start or Path.cwd()).resolve()
    for directory in [start, *start.parents]:
        candidate = directory / PROJECT_FILE_NAME
        if candidate.is_file():
            return candidate

    raise ProjectNotFoundError(
        f"No {PROJECT_FILE_NAME} found in {start} or any parent directory"
    )


def _config_from_yaml(data: Any, where: str) -> Optional[ConfigMap]:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ProjectFileError(f"'{where}' must be a mapping")

    config = {}
    for raw_key, raw_value in data.items():
        try:
            key = Key.parse(str(raw_key))
        except StackconfError as e:
            raise ProjectFileError(f"invalid key in '{where}': {e}") from e
        config[key] = Value.from_yaml(raw_value)
    return config


def _config_to_yaml(config: ConfigMap) -> dict:
    return {str(key): value.to_yaml() for key, value in config.items()}


def store_from_dict(data: Any) -> ConfigStore:
    """Build a ConfigStore from a parsed project document."""
    if not isinstance(data, dict):
        raise ProjectFileError("project file must contain a mapping")

    name = data.get("name")
    if not isinstance(name, str) or not is_valid_part(name):
        raise ProjectFileError(f"invalid project name: {name!r}")

    stacks = None
    raw_stacks = data.get("stacks")
    if raw_stacks is not None:
        if not isinstance(raw_stacks, dict):
            raise ProjectFileError("'stacks' must be a mapping")
        stacks = {}
        for stack_name, info in raw_stacks.items():
            info = info or {}
            if not isinstance(info, dict):
                raise ProjectFileError(f"stack '{stack_name}' must be a mapping")
            stacks[str(stack_name)] = StackInfo(
                config=_config_from_yaml(info.get("config"), f"stacks.{stack_name}.config")
            )

    salt = data.get("encryptionsalt")
    if salt is not None and not isinstance(salt, str):
        raise ProjectFileError(f"invalid encryption salt: {salt!r}")

    return ConfigStore(
        name=name,
        config=_config_from_yaml(data.get("config"), "config"),
        stacks=stacks,
        encryption_salt=salt,
    )


def store_to_dict(store: ConfigStore) -> dict:
    """Serialize a ConfigStore to a project document."""
    data: dict = {"name": store.name}
    if store.encryption_salt:
        data["encryptionsalt"] = store.encryption_salt
    if store.config is not None:
        data["config"] = _config_to_yaml(store.config)
    if store.stacks is not None:
        data["stacks"] = {
            stack_name: ({"config": _config_to_yaml(info.config)} if info.config is not None else {})
            for stack_name, info in store.stacks.items()
        }
    return data


def load_project(path: Path) -> ConfigStore:
    """Read and parse a project file."""
    try:
        data = yaml.safe_load(path.read_text())
    except FileNotFoundError as e:
        raise ProjectNotFoundError(f"Project file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ProjectFileError(f"Failed to parse {path}: {e}") from e

    store = store_from_dict(data)
    logger.debug("Loaded project %s from %s", store.name, path)
    return store


def save_project(store: ConfigStore, path: Path) -> None:
    """Write the project file atomically (temp file, then rename)."""
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_file = path.with_suffix(".yaml.tmp")
    try:
        with open(temp_file, "w") as f:
            yaml.safe_dump(store_to_dict(store), f, default_flow_style=False, sort_keys=False)

        temp_file.replace(path)

    finally:
        if temp_file.exists():
            temp_file.unlink()

    logger.debug("Saved project %s to %s", store.name, path)


def init_project(path: Path, name: str, force: bool = False) -> ConfigStore:
    """Create a new, empty project file."""
    if not is_valid_part(name):
        raise StackconfError(f"Invalid project name: {name!r}")

    if path.exists() and not force:
        raise StackconfError(f"Project file already exists: {path}")

    store = ConfigStore(name=name)
    save_project(store, path)
    return store


class Project:
    """
    A project file and its configuration, loaded at most once.

    ``path`` is located lazily so that commands which never need the
    project do not fail when there is none.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = path
        self._store: Optional[ConfigStore] = None

    @property
    def path(self) -> Path:
        if self._path is None:
            self._path = find_project_file()
        return self._path

    @property
    def store(self) -> ConfigStore:
        if self._store is None:
            self._store = load_project(self.path)
        return self._store

    def save(self, store: ConfigStore) -> None:
        save_project(store, self.path)
        self._store = store
