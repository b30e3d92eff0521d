"""Domain services: room coordination and presence tracking.

Imported by the Socket.IO handlers and HTTP routes, keeping transport
concerns separated from room and queue state.
"""
