"""
NoteVault Backend - Multi-tenant note-taking service

Notes with per-note version history, sharing and access control, plus
realtime notifications over WebSocket and an admin console.
"""

__version__ = "1.0.0"
