"""
Core utilities shared by every Lorekeeper subsystem.

Modules:
    - exceptions: exception hierarchy
    - logging_manager: structured rotating logger and null logger
    - validators: normalization helpers for incoming metadata
    - paths: project path constants
    - config: YAML configuration loaders
"""
