"""Use-case layer for remote writes and multi-step flows.

Each module coordinates domain objects and ports without performing transport
I/O directly, preserving MVVM + Hexagonal boundaries. Failures surface as
``UseCaseError`` with a stable code.
"""
