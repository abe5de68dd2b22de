"""Adapter package for external I/O implementations.

Purpose:
    Concrete implementations of the domain ports: the PocketBase REST client,
    the per-browser session store and the local settings file.

Dependencies:
    ``requests`` for HTTP, the filesystem for settings, and the domain
    protocol definitions.

Call context:
    Imported by ``epixodo.app.controller`` for runtime wiring and by tests for
    transport-level behavior verification.
"""
