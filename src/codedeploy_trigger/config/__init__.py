"""Configuration loading and defaults for codedeploy-trigger.

Main components:
- load_config_file: Load option defaults from a YAML file
- Default values for wait durations and environment variable prefix
"""

from codedeploy_trigger.config.loader import load_config_file

__all__ = ["load_config_file"]
