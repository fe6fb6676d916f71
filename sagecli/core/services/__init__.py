"""Application services behind the CLI commands."""
