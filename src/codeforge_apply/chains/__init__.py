"""Orchestration chains built on top of the apply engine."""
