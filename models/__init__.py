"""Data models and utility functions.

This package contains:
- types: Bridge configuration, light, group and sensor records
- wire: Schemas for decoding bridge and discovery responses
- color: Conversion between bridge HSB, unit HSB and RGB
- demo: Canned data for the offline demo bridge
- utils: Name matching helpers
"""
