"""Use-case layer for the record and session workflows.

Each module talks to the backend only through the ports in
``epixodo.domain.ports`` and reports failures as ``UseCaseError``.
"""
