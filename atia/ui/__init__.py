"""
ATIA Dashboard UI state, settings persistence and console rendering.
"""
