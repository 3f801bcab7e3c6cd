"""Swarm Review - multi-agent consensus code review."""

__version__ = "1.0.0"
