"""Transactional file-operation apply engine for generated project trees."""

__version__ = "0.1.0"
