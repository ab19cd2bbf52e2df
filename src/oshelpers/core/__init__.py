"""Core building blocks: configuration, exceptions and I/O helpers."""
