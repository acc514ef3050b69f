"""Configuration file loader for codedeploy-trigger.

A configuration file is a flat YAML mapping whose keys are the long option
names of the ``run`` command, with dashes or underscores. Values from the file
act as defaults: environment variables and command-line flags override them.

Example:

    application_name: my-app
    deployment_group_name: my-group
    max_wait_duration: 45m
    target: ECS
    task_definition_arn: arn:aws:ecs:eu-central-1:123456789012:task-definition/web:42
    container_name: web
    container_port: 8080
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from codedeploy_trigger.lib.errors import ConfigError

logger = logging.getLogger(__name__)

# Keys holding paths, resolved relative to the config file
PATH_KEYS = frozenset({"appspec_file"})


def load_config_file(path: str | Path, allowed_keys: set[str]) -> dict[str, Any]:
    """Load option defaults from a YAML configuration file.

    Args:
        path: Path to the YAML file
        allowed_keys: Option names (underscore form) the file may set

    Returns:
        Mapping of option name to value, with path values made absolute

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML, is not a
            mapping, or contains unknown keys
    """
    config_path = Path(path)
    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(
            field="config", message=f"Failed to read {config_path}: {exc}"
        ) from exc

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigError(
            field="config", message=f"Invalid YAML in {config_path}: {exc}"
        ) from exc

    if data is None:
        logger.debug(f"Config file {config_path} is empty")
        return {}

    if not isinstance(data, dict):
        raise ConfigError(
            field="config",
            message=f"{config_path} must contain a mapping of option names",
        )

    result: dict[str, Any] = {}
    for raw_key, value in data.items():
        key = str(raw_key).replace("-", "_")
        if key not in allowed_keys:
            raise ConfigError(
                field=str(raw_key),
                message=(
                    f"Unknown option in {config_path}. "
                    f"Supported: {', '.join(sorted(allowed_keys))}"
                ),
            )
        if key in PATH_KEYS and value is not None:
            value = str((config_path.parent / str(value)).resolve())
        result[key] = value

    logger.debug(f"Loaded {len(result)} option(s) from {config_path}")
    return result
