"""Controller configuration management.

This module provides the WidgetConfiguration class for the settings every
ViewController shares (construction timeout, stale-command policy, command
table strictness, diagnostic callbacks), plus loading of defaults from
``vegawidget.yaml``.
"""

import logging
import os
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any, Dict, List, Literal, Optional

import yaml

if TYPE_CHECKING:
    from .callbacks import DiagnosticCallback

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "vegawidget.yaml"

StaleCommandPolicy = Literal["run", "drop"]
STALE_COMMAND_POLICIES = ("run", "drop")


def load_vegawidget_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """Read configuration defaults from a YAML file; a missing file yields ``{}``."""
    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            config = yaml.safe_load(f) or {}
        logger.debug(f"Loaded vegawidget config from {config_path}")
        return config
    return {}


@dataclass
class WidgetConfiguration:
    """Encapsulates view controller configuration.

    Unset values (None) inherit from a parent configuration via ``merge_with``.

    Attributes:
        construction_timeout: Seconds to wait for the engine to build a view;
            None waits forever
        stale_commands: What happens to commands queued against a future that a
            later ``create`` replaced: "run" lets them run against the superseded
            view, "drop" skips them
        allow_unlisted_commands: Forward command names missing from the command
            table verbatim to the view
        callbacks: Diagnostic callbacks receiving failure reports
    """

    construction_timeout: Optional[float] = None
    stale_commands: Optional[StaleCommandPolicy] = None
    allow_unlisted_commands: Optional[bool] = None
    callbacks: Optional[List["DiagnosticCallback"]] = None

    def __post_init__(self):
        if self.stale_commands is not None and self.stale_commands not in STALE_COMMAND_POLICIES:
            raise ValueError(
                f"stale_commands must be one of {STALE_COMMAND_POLICIES}, got {self.stale_commands!r}"
            )
        if self.construction_timeout is not None and self.construction_timeout <= 0:
            raise ValueError("construction_timeout must be positive")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WidgetConfiguration":
        """Create a configuration from a dictionary, ignoring unknown keys.

        Callbacks cannot be expressed in YAML and are never read from ``data``.
        """
        valid_fields = {f.name for f in fields(cls)} - {"callbacks"}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)

    @classmethod
    def from_file(cls, config_path: str = DEFAULT_CONFIG_PATH) -> "WidgetConfiguration":
        return cls.from_dict(load_vegawidget_config(config_path))

    def merge_with(self, parent_config: Optional["WidgetConfiguration"]) -> "WidgetConfiguration":
        """Merge with parent configuration, child values take precedence.

        Example:
            >>> parent = WidgetConfiguration(construction_timeout=5.0, stale_commands="drop")
            >>> child = WidgetConfiguration(stale_commands="run")
            >>> merged = child.merge_with(parent)
            >>> # merged.construction_timeout == 5.0 (inherited from parent)
            >>> # merged.stale_commands == "run" (child overrides)
        """
        if parent_config is None:
            return WidgetConfiguration(
                construction_timeout=self.construction_timeout,
                stale_commands=self.stale_commands,
                allow_unlisted_commands=self.allow_unlisted_commands,
                callbacks=self.callbacks,
            )

        return WidgetConfiguration(
            construction_timeout=self.construction_timeout
            if self.construction_timeout is not None
            else parent_config.construction_timeout,
            stale_commands=self.stale_commands
            if self.stale_commands is not None
            else parent_config.stale_commands,
            allow_unlisted_commands=self.allow_unlisted_commands
            if self.allow_unlisted_commands is not None
            else parent_config.allow_unlisted_commands,
            callbacks=self.callbacks if self.callbacks is not None else parent_config.callbacks,
        )

    @property
    def effective_stale_commands(self) -> StaleCommandPolicy:
        return self.stale_commands or "run"

    @property
    def effective_allow_unlisted_commands(self) -> bool:
        return True if self.allow_unlisted_commands is None else self.allow_unlisted_commands

    @property
    def effective_callbacks(self) -> List["DiagnosticCallback"]:
        """Configured callbacks, or a single LoggingCallback when none are set."""
        if self.callbacks is not None:
            return self.callbacks

        from .callbacks import default_callbacks

        return default_callbacks()
