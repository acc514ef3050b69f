"""Command-line interface for codedeploy-trigger."""
