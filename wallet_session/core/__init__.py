"""
Session orchestration core: spaces, the space registry, change events and the
session state machine.
"""
