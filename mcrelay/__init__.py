"""Minecraft WebSocket relay package.
This package contains the relay components: state registries, message protocol, router/handlers, broadcast helpers, connection lifecycle, HTTP control API and configuration.
"""

# Expose top-level modules for convenience
__all__ = [
    'config',
    'errors',
    'state',
    'protocol',
    'handlers',
    'utils',
    'minecraft_ws',
    'lifecycle',
    'control',
    'main'
]
