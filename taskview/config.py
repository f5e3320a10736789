"""Configuration for taskview.

Two kinds of settings live here:
- ViewDefaults: the values the views substitute for absent fields
- Settings: runtime settings read from the environment (and a .env file)
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from taskview.errors import ConfigError
from taskview.models import Priority, TaskStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewDefaults:
    """Recognised defaults applied when a record leaves a field out.

    Attributes:
        default_priority: Priority assumed for tasks without one
        window_days: Size of the dashboard's recent/upcoming window
        task_status_order: Board column and sort order for task statuses
        priority_order: Priority histogram buckets, most pressing first
    """

    default_priority: Priority = Priority.MEDIUM
    window_days: int = 7
    task_status_order: Tuple[TaskStatus, ...] = tuple(TaskStatus)
    priority_order: Tuple[Priority, ...] = tuple(Priority)

    def priority_of(self, entity) -> object:
        """Return the entity's priority, or the default when absent."""
        priority = getattr(entity, "priority", None)
        return self.default_priority if priority in (None, "") else priority


DEFAULTS = ViewDefaults()


@dataclass
class Settings:
    """Runtime settings.

    Attributes:
        data_path: Path of the JSON snapshot file
        window_days: Dashboard window size in days
        log_level: Name of the logging level for the CLI
    """

    data_path: str = "snapshot.json"
    window_days: int = DEFAULTS.window_days
    log_level: str = "WARNING"
    defaults: ViewDefaults = field(default_factory=ViewDefaults)


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ConfigError(f"{name} must be non-negative, got {value}")
    return value


def get_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from environment variables.

    Args:
        env: Mapping to read from. If None, loads a .env file into the
             process environment and reads os.environ.

    Returns:
        Populated Settings instance

    Raises:
        ConfigError: If a numeric setting is not a non-negative integer
    """
    if env is None:
        load_dotenv()
        env = os.environ

    window_days = _int_setting(env, "TASKVIEW_WINDOW_DAYS", DEFAULTS.window_days)
    settings = Settings(
        data_path=env.get("TASKVIEW_DATA_PATH", "snapshot.json"),
        window_days=window_days,
        log_level=env.get("TASKVIEW_LOG_LEVEL", "WARNING").upper(),
        defaults=ViewDefaults(window_days=window_days),
    )
    logger.debug("Loaded settings: %s", settings)
    return settings
