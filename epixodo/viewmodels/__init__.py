"""ViewModel package for page state and command surfaces.

Call context:
    ``epixodo/web_ui/main.py`` builds viewmodels through
    ``epixodo.web_ui.runtime.WebRuntime`` and re-renders NiceGUI elements from
    their state after every command.

Dependencies:
    Modules in this package depend on domain types and injected use-case
    callables only. HTTP and browser storage stay outside.

Responsibilities:
    - Expose mutable page state (lists, modal forms, route decisions).
    - Turn records into labels and sections the pages can render directly.
    - Keep MVVM boundaries explicit by avoiding transport or persistence logic.
"""
