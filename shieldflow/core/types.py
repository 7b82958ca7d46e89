"""
Type definitions for ShieldFlow
"""

import math
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional, Tuple, Dict, Any


class ConnectionState(Enum):
    DISCONNECTED = 'DISCONNECTED'
    CONNECTING = 'CONNECTING'
    CONNECTED = 'CONNECTED'
    DISCONNECTING = 'DISCONNECTING'


class Severity(str, Enum):
    INFO = 'info'
    SUCCESS = 'success'
    WARNING = 'warning'
    ERROR = 'error'


class Protocol(str, Enum):
    IKEV2 = 'IKEv2'
    WIREGUARD = 'WireGuard'
    OPENVPN = 'OpenVPN'


@dataclass(frozen=True)
class Server:
    """VPN server descriptor"""
    id: str
    country: str
    city: str
    ip: str
    load: int  # 0-100%
    ping: int  # ms
    premium: bool = False
    features: Tuple[str, ...] = ()
    flag: str = ''

    @classmethod
    def from_config(cls, config: Dict) -> 'Server':
        data = dict(config)
        data['features'] = tuple(data.get('features') or ())
        return cls(**data)

    @property
    def label(self) -> str:
        return f"{self.country} ({self.city})"


@dataclass(frozen=True)
class TrafficSample:
    """Single point of the traffic chart"""
    timestamp: float
    download_mbps: float = 0.0
    upload_mbps: float = 0.0


@dataclass(frozen=True)
class LogEntry:
    id: str
    timestamp: str
    message: str
    severity: Severity = Severity.INFO


@dataclass
class Preferences:
    """User preferences, echoed into the connection log"""
    protocol: Protocol = Protocol.IKEV2
    kill_switch: bool = True
    auto_connect: bool = False

    def __post_init__(self):
        # Accepts plain strings coming from YAML or argparse
        self.protocol = Protocol(self.protocol)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Preferences':
        data = data or {}
        kill_switch = data.get('kill_switch', True)
        auto_connect = data.get('auto_connect', False)
        for name, value in (('kill_switch', kill_switch),
                            ('auto_connect', auto_connect)):
            # bool("false") is True, so quoted YAML values are rejected
            if not isinstance(value, bool):
                raise ValueError(f"{name} must be true or false, got {value!r}")

        try:
            return cls(
                protocol=data.get('protocol', Protocol.IKEV2),
                kill_switch=kill_switch,
                auto_connect=auto_connect,
            )
        except ValueError:
            raise ValueError(f"Unknown protocol: {data.get('protocol')!r}")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['protocol'] = self.protocol.value
        return data

    def describe(self) -> str:
        return (
            f"protocol={self.protocol.value}, "
            f"kill switch={'on' if self.kill_switch else 'off'}, "
            f"auto-connect={'on' if self.auto_connect else 'off'}"
        )


@dataclass
class Session:
    """Connected session; duration is derived, never accumulated"""
    start_time: float
    end_time: Optional[float] = None

    def duration(self, now: float) -> int:
        if self.end_time is not None:
            now = min(now, self.end_time)
        return max(0, math.floor(now - self.start_time))


@dataclass(frozen=True)
class Recommendation:
    recommended_server_id: str
    reason: str
    fallback: bool = False
