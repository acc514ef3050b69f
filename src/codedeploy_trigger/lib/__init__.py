"""Shared utilities for codedeploy-trigger."""
