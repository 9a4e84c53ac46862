"""Settings for stackconf, read from the environment."""

import os
from pathlib import Path
from typing import Optional

PROJECT_FILE_NAME = "Stackconf.yaml"

# Shown in place of secret values when they are not revealed
SECRET_MASK = "[secret]"

KDF_ITERATIONS = 100_000


def get_config_dir() -> Path:
    """Get config directory following XDG spec."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / "stackconf"


def get_workspace_file() -> Path:
    """Get the file recording each project's selected stack."""
    return get_config_dir() / "workspace.yaml"


def get_project_file_override() -> Optional[Path]:
    """Project file named by STACKCONF_PROJECT_FILE, if any."""
    env_file = os.environ.get("STACKCONF_PROJECT_FILE")
    if env_file:
        return Path(env_file).expanduser()
    return None


def get_passphrase() -> Optional[str]:
    """Passphrase from STACKCONF_PASSPHRASE, if set (empty counts as set)."""
    return os.environ.get("STACKCONF_PASSPHRASE")


def get_stack_override() -> Optional[str]:
    """Stack named by STACKCONF_STACK, if any."""
    return os.environ.get("STACKCONF_STACK") or None


def get_log_level(verbose: bool = False) -> str:
    """Log level from STACKCONF_LOG_LEVEL, else DEBUG when verbose, else WARNING."""
    env_level = os.environ.get("STACKCONF_LOG_LEVEL")
    if env_level:
        return env_level.upper()
    return "DEBUG" if verbose else "WARNING"
