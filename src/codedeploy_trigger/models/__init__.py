"""Pydantic models for codedeploy-trigger."""
