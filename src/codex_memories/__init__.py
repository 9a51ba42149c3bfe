"""codex-memories — durable notes extracted from conversation turns."""

__version__ = "0.1.0"
