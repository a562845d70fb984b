"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations for domain ports (backend HTTP function
    API, local filesystem store, and an in-memory backend double) used by use
    cases.

Dependencies:
    ``backend_rest`` and ``http_client`` depend on ``requests``;
    ``storage_local`` uses the filesystem only.

Call context:
    Imported by ``kept.app.controller`` (runtime wiring), by the web runtime
    (demo backend) and by tests.
"""
