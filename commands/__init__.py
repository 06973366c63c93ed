"""CLI command modules.

This package contains:
- setup: Discovery, pairing and first-time configuration, plus the CLI group class
- bridges: Bridge registry commands (list, add, rename, remove, switch)
- control: Light, group and sensor commands
- common: Shared helpers for building state and resolving names
"""
