"""
Display helpers used by the dashboard and the CLI
"""

from ..core.types import ConnectionState, Severity

STATE_LABELS = {
    ConnectionState.DISCONNECTED: 'Unsecured',
    ConnectionState.CONNECTING: 'Connecting...',
    ConnectionState.CONNECTED: 'Secured',
    ConnectionState.DISCONNECTING: 'Disconnecting...',
}

# rich style names
STATE_STYLES = {
    ConnectionState.DISCONNECTED: 'red',
    ConnectionState.CONNECTING: 'yellow',
    ConnectionState.CONNECTED: 'green',
    ConnectionState.DISCONNECTING: 'grey50',
}

SEVERITY_STYLES = {
    Severity.INFO: 'white',
    Severity.SUCCESS: 'green',
    Severity.WARNING: 'yellow',
    Severity.ERROR: 'red',
}

NO_DURATION = '--:--:--'


def format_duration(seconds: int) -> str:
    """Format whole seconds as HH:MM:SS"""
    seconds = max(0, int(seconds))
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_session_time(state: ConnectionState, seconds: int) -> str:
    if state != ConnectionState.CONNECTED:
        return NO_DURATION
    return format_duration(seconds)


def format_rate(mbps: float) -> str:
    return f"{mbps:.1f} Mb/s"
