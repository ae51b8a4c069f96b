"""Core: configuration, diagnostics, errors, path helpers."""
