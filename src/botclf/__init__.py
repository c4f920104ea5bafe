"""Bot / not-a-bot text classifier: runtime, CLI, services, infrastructure."""

__all__ = [
    "cli",
]
