"""Core functionality for the HueTrek bridge client.

This package contains:
- transport: HTTP access to bridges and the discovery service
- discovery: Cloud and SSDP bridge discovery
- pairing: Link button pairing
- registry: Known bridges and the current selection
- sync: Lights, groups and sensors mirrored from the current bridge
- state: HueState, the application state object tying these together
- config: Settings and the persistent key-value store
- dispatch: Update queue and observer notification
- errors: Failure taxonomy and user-facing messages
"""
