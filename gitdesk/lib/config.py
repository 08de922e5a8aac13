"""
Configuration for gitdesk.

Loads an optional config.yaml. If no config file exists, returns defaults
matching the built-in behaviour.

Lookup order:
1. Explicit path (--config)
2. $GITDESK_CONFIG
3. ~/.config/gitdesk/config.yaml

Example:
    ssh_command: ssh -i ~/.ssh/work_key -o BatchMode=yes -o StrictHostKeyChecking=ask
    env:
      GIT_HTTP_LOW_SPEED_TIME: "30"
    log_level: info
    phrases:
      de:
        up_to_date:
          - idiom: bereits aktuell
            message: Already up to date
        errors:
          merge_conflict: ["automatischer merge fehlgeschlagen"]
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from gitdesk.git.invocation import InvocationContext
from gitdesk.git.phrases import DEFAULT_PHRASES
from gitdesk.git.runner import NETWORK_ENV
from gitdesk.lib import validate

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GITDESK_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/gitdesk/config.yaml")


@dataclass
class GitdeskConfig:
    """Settings from config.yaml."""
    ssh_command: str | None = None
    env: dict[str, str] = field(default_factory=dict)
    phrases: dict[str, dict] = field(default_factory=dict)
    log_level: str | None = None
    source: Path | None = None

    def network_env(self) -> dict[str, str]:
        """Environment applied to network commands."""
        env = dict(NETWORK_ENV)
        if self.ssh_command:
            env["GIT_SSH_COMMAND"] = self.ssh_command
        env.update(self.env)
        return env

    def invocation_context(self) -> InvocationContext:
        return InvocationContext(
            network_env=self.network_env(),
            phrases=DEFAULT_PHRASES.extended(self.phrases),
        )


def resolve_config_path(explicit: Optional[Path] = None) -> Path:
    if explicit is not None:
        return explicit
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)
    return DEFAULT_CONFIG_PATH.expanduser()


def load_config(path: Optional[Path] = None) -> GitdeskConfig:
    """Load config.yaml and return GitdeskConfig.

    If the file doesn't exist, returns defaults. Unparseable YAML is logged
    and ignored; YAML that parses but breaks the schema raises.

    Raises:
        ValidationError: If the config doesn't match config.schema.json
    """
    config_path = resolve_config_path(path)
    if not config_path.exists():
        return GitdeskConfig()

    try:
        data = yaml.safe_load(config_path.read_text())
    except (yaml.YAMLError, OSError) as e:
        logger.warning(f"Failed to parse {config_path}: {e}")
        return GitdeskConfig()

    if data is None:
        return GitdeskConfig(source=config_path)

    validate.validate(data, "config")

    logger.debug(f"Loaded config from {config_path}")
    return GitdeskConfig(
        ssh_command=data.get("ssh_command"),
        env=dict(data.get("env") or {}),
        phrases=dict(data.get("phrases") or {}),
        log_level=data.get("log_level"),
        source=config_path,
    )
