"""Runtime configuration read from the environment (and .env via python-dotenv)."""
import os
from dataclasses import dataclass, field
from typing import Dict, Optional


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    return int(value)


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    return float(value)


@dataclass
class Settings:
    host: str = '0.0.0.0'
    port: int = 3000
    ws_port: Optional[int] = None
    ws_path: str = '/ws'
    supported_version: str = '1.12.2'
    default_world: str = 'overworld'
    spawn: Dict[str, float] = field(default_factory=lambda: {'x': 0, 'y': 64, 'z': 0})
    reap_interval: float = 30.0
    stats_interval: float = 60.0
    public_dir: str = 'public'
    log_level: str = 'INFO'

    def __post_init__(self):
        # The WebSocket listener sits next to the control API by default
        if self.ws_port is None:
            self.ws_port = self.port + 1

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> 'Settings':
        """Build settings from environment variables, loading a .env file first when present."""
        from dotenv import load_dotenv
        load_dotenv(env_file)
        port = _env_int('PORT', 3000)
        return cls(
            host=os.getenv('HOST', '0.0.0.0'),
            port=port,
            ws_port=_env_int('WS_PORT', port + 1),
            ws_path=os.getenv('WS_PATH', '/ws'),
            supported_version=os.getenv('SUPPORTED_VERSION', '1.12.2'),
            default_world=os.getenv('DEFAULT_WORLD', 'overworld'),
            spawn={
                'x': _env_float('SPAWN_X', 0),
                'y': _env_float('SPAWN_Y', 64),
                'z': _env_float('SPAWN_Z', 0),
            },
            reap_interval=_env_float('REAP_INTERVAL', 30.0),
            stats_interval=_env_float('STATS_INTERVAL', 60.0),
            public_dir=os.getenv('PUBLIC_DIR', 'public'),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        )
