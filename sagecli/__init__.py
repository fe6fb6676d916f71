"""sageCLI: AI career guidance behind a rate-limit aware request gateway."""

__version__ = "0.1.0"
