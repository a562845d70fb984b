"""ViewModel package for screen state and command surfaces.

Call context:
    ``kept/web_ui/main.py`` builds one view model per page, fills its query
    results through ``run_query`` and binds page events to its commands.

Dependencies:
    Modules in this package depend on domain types, formatting helpers and
    use-case callables injected by the caller. Transport and persistence stay
    in adapters.

Responsibilities:
    - Expose mutable screen state and in-flight flags for remote writes.
    - Transform typed domain snapshots into view-facing DTOs and labels.
    - Report use-case failures through alert callbacks or inline messages.
"""
