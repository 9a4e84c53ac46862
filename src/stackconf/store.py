"""In-memory project configuration and stack resolution."""

from dataclasses import dataclass
from typing import Dict, Optional

from .keys import Key
from .values import Value

ConfigMap = Dict[Key, Value]


@dataclass
class StackInfo:
    """Per-stack overrides of project configuration."""

    config: Optional[ConfigMap] = None


@dataclass
class ConfigStore:
    """
    A project's configuration state.

    ``config`` holds project-wide values and ``stacks`` maps each stack
    name to its overrides. Either may be ``None`` when nothing has been
    written yet.
    """

    name: str
    config: Optional[ConfigMap] = None
    stacks: Optional[Dict[str, StackInfo]] = None
    encryption_salt: Optional[str] = None

    def stack_config(self, stack: str) -> Optional[ConfigMap]:
        """The mapping a write to ``stack`` targets, if it exists."""
        if not stack:
            return self.config
        if not self.stacks or stack not in self.stacks:
            return None
        return self.stacks[stack].config

    def writable_config(self, stack: str) -> ConfigMap:
        """Get or create the mapping a write to ``stack`` targets."""
        if not stack:
            if self.config is None:
                self.config = {}
            return self.config

        if self.stacks is None:
            self.stacks = {}
        info = self.stacks.setdefault(stack, StackInfo())
        if info.config is None:
            info.config = {}
        return info.config

    def effective_config(self, stack: str) -> Optional[ConfigMap]:
        """Project values overlaid with ``stack``'s overrides."""
        if not stack or not self.stacks or stack not in self.stacks:
            return self.config
        return resolve(self.config, self.stacks[stack].config)


def resolve(project: Optional[ConfigMap], override: Optional[ConfigMap]) -> Optional[ConfigMap]:
    """
    Overlay ``override`` onto ``project`` without mutating either.

    When one side is empty the other is returned as-is rather than copied.
    """
    if not override:
        return project

    if not project:
        return override

    merged = dict(project)
    merged.update(override)
    return merged


def has_secure_value(config: Optional[ConfigMap]) -> bool:
    """Whether any value in ``config`` is encrypted."""
    return any(value.secure for value in (config or {}).values())
