"""Shared utilities: Go-compatible text quoting and file I/O helpers."""
