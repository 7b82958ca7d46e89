"""
Connection lifecycle simulator with timer-driven state transitions
"""

import logging
from typing import Optional, Dict, List, Callable

from .clock import Clock, TimerHandle
from .constants import CONNECT_DELAY, DISCONNECT_DELAY, TICK_INTERVAL
from .log_sink import LogSink
from .traffic import TrafficGenerator
from .types import (
    ConnectionState, Server, Preferences, Session, Severity
)

logger = logging.getLogger(__name__)

EVENTS = ('state_change', 'log', 'traffic', 'duration')


class ConnectionSimulator:
    """Simulated VPN connection with state management"""

    def __init__(self, clock: Clock, server: Server,
                 preferences: Optional[Preferences] = None,
                 log_sink: Optional[LogSink] = None,
                 traffic: Optional[TrafficGenerator] = None,
                 connect_delay: float = CONNECT_DELAY,
                 disconnect_delay: float = DISCONNECT_DELAY,
                 tick_interval: float = TICK_INTERVAL):
        self.clock = clock
        self.state = ConnectionState.DISCONNECTED
        self.selected_server = server
        self.preferences = preferences or Preferences()
        self.log_sink = log_sink or LogSink()
        self.traffic = traffic or TrafficGenerator()
        self.session: Optional[Session] = None

        self.connect_delay = connect_delay
        self.disconnect_delay = disconnect_delay
        self.tick_interval = tick_interval

        # Timers
        self._pending_transition: Optional[TimerHandle] = None
        self._duration_timer: Optional[TimerHandle] = None
        self._traffic_timer: Optional[TimerHandle] = None
        self._disposed = False

        self._callbacks: Dict[str, List[Callable]] = {
            event: [] for event in EVENTS
        }
        self.log_sink.subscribe(self._on_log_entry)

    @classmethod
    def from_config(cls, config, catalog, clock: Clock,
                    rng=None) -> 'ConnectionSimulator':
        """Build a simulator from a ConfigManager and a ServerCatalog"""
        server = catalog.get(config.get('selected_server')) or catalog.default
        return cls(
            clock=clock,
            server=server,
            preferences=config.load_preferences(),
            log_sink=LogSink(
                capacity=int(config.get('simulation.log_capacity'))
            ),
            traffic=TrafficGenerator(
                window=int(config.get('simulation.traffic_window')), rng=rng
            ),
            connect_delay=float(config.get('simulation.connect_delay')),
            disconnect_delay=float(config.get('simulation.disconnect_delay')),
            tick_interval=float(config.get('simulation.tick_interval')),
        )

    # -- subscriptions --------------------------------------------------

    def register_callback(self, event: str, callback: Callable):
        """Register event callback"""
        if event not in self._callbacks:
            raise ValueError(f"Unknown event: {event}")
        self._callbacks[event].append(callback)

    def on_state_change(self, callback: Callable):
        self.register_callback('state_change', callback)

    def on_log_appended(self, callback: Callable):
        self.register_callback('log', callback)

    def on_traffic_sample(self, callback: Callable):
        self.register_callback('traffic', callback)

    def _notify_callbacks(self, event: str, *args, **kwargs):
        """Notify registered callbacks"""
        for callback in list(self._callbacks.get(event, [])):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Callback error: {e}")

    def _on_log_entry(self, entry):
        self._notify_callbacks('log', entry)

    # -- intents ---------------------------------------------------------

    def connect(self, server: Optional[Server] = None,
                preferences: Optional[Preferences] = None) -> bool:
        """
        Start a simulated connection

        Args:
            server: Server to connect to, defaults to the selected one
            preferences: Preferences to connect with

        Returns:
            bool: True if the connect sequence started
        """
        if self._disposed or self.state != ConnectionState.DISCONNECTED:
            logger.debug(f"Ignoring connect while {self.state.name}")
            return False

        if server is not None:
            self.selected_server = server
        if preferences is not None:
            self.preferences = preferences

        server = self.selected_server
        old_state = self._set_state(ConnectionState.CONNECTING)
        self._pending_transition = self.clock.call_later(
            self.connect_delay, self._complete_connect
        )

        self.log(f"Connecting to {server.label}...")
        self.log(f"Protocol: {self.preferences.protocol.value}")
        self._announce(old_state)
        return True

    def disconnect(self) -> bool:
        """
        Start the simulated disconnect sequence

        Returns:
            bool: True if the disconnect sequence started
        """
        if self._disposed or self.state != ConnectionState.CONNECTED:
            logger.debug(f"Ignoring disconnect while {self.state.name}")
            return False

        # Timers stop as part of leaving CONNECTED, not on the next tick
        self._stop_timers()
        if self.session:
            self.session.end_time = self.clock.now()

        old_state = self._set_state(ConnectionState.DISCONNECTING)
        self._pending_transition = self.clock.call_later(
            self.disconnect_delay, self._complete_disconnect
        )

        self.log("Initiating disconnect sequence...")
        self._announce(old_state)
        return True

    def toggle(self) -> bool:
        """Connect when disconnected, disconnect when connected"""
        if self.state == ConnectionState.CONNECTED:
            return self.disconnect()
        return self.connect()

    def select_server(self, server: Server) -> bool:
        """Change the selected server; only allowed while disconnected"""
        if self._disposed or self.state != ConnectionState.DISCONNECTED:
            logger.debug(f"Ignoring server selection while {self.state.name}")
            return False

        self.selected_server = server
        self.log(f"Selected server: {server.country}")
        return True

    def set_preferences(self, preferences: Preferences):
        """Replace preferences; they only show up in the log"""
        self.preferences = preferences
        if not self._disposed:
            self.log(f"Preferences updated: {preferences.describe()}")

    def log(self, message: str, severity: Severity = Severity.INFO):
        return self.log_sink.record(message, severity)

    # -- timer callbacks --------------------------------------------------

    def _complete_connect(self):
        self._pending_transition = None
        if self._disposed or self.state != ConnectionState.CONNECTING:
            return

        self.session = Session(start_time=self.clock.now())
        old_state = self._set_state(ConnectionState.CONNECTED)
        self._duration_timer = self.clock.call_every(
            self.tick_interval, self._on_duration_tick
        )
        self._traffic_timer = self.clock.call_every(
            self.tick_interval, self._on_traffic_tick
        )

        self.log(
            f"Encrypted tunnel established. IP: {self.selected_server.ip}",
            Severity.SUCCESS
        )
        self._announce(old_state)

    def _complete_disconnect(self):
        self._pending_transition = None
        if self._disposed or self.state != ConnectionState.DISCONNECTING:
            return

        self._stop_timers()
        self.session = None
        self.traffic.reset(self.clock.now())
        old_state = self._set_state(ConnectionState.DISCONNECTED)

        self.log("Disconnected successfully.", Severity.WARNING)
        self._notify_callbacks('duration', 0)
        self._announce(old_state)

    def _on_duration_tick(self):
        self._notify_callbacks('duration', self.duration)

    def _on_traffic_tick(self):
        point = self.traffic.sample(self.clock.now())
        self._notify_callbacks('traffic', point)

    # -- lifecycle ---------------------------------------------------------

    def dispose(self):
        """Cancel every outstanding timer; safe to call more than once"""
        if self._pending_transition:
            self._pending_transition.cancel()
            self._pending_transition = None
        self._stop_timers()

        if self._disposed:
            return
        self._disposed = True

        if self.state != ConnectionState.DISCONNECTED:
            logger.warning(f"Forced teardown while {self.state.name}")
            self.session = None
            self.traffic.reset(self.clock.now())
            old_state = self._set_state(ConnectionState.DISCONNECTED)
            self._announce(old_state, "teardown")

        self.log_sink.unsubscribe(self._on_log_entry)
        for callbacks in self._callbacks.values():
            callbacks.clear()

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _stop_timers(self):
        for timer in (self._duration_timer, self._traffic_timer):
            if timer:
                timer.cancel()
        self._duration_timer = None
        self._traffic_timer = None

    def _set_state(self, new_state: ConnectionState) -> ConnectionState:
        """Switch state without notifying; returns the previous state"""
        old_state = self.state
        self.state = new_state
        logger.debug(f"State change: {old_state.name} -> {new_state.name}")
        return old_state

    def _announce(self, old_state: ConnectionState, message: str = ""):
        """Notify state observers once the transition has fully run"""
        # Observers may issue new intents, so this is always the last step
        self._notify_callbacks('state_change', old_state, self.state, message)

    # -- queries -------------------------------------------------------------

    @property
    def duration(self) -> int:
        """Whole seconds since the tunnel came up, 0 outside a session"""
        if self.session is None:
            return 0
        return self.session.duration(self.clock.now())

    @property
    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    @property
    def is_busy(self) -> bool:
        return self.state in (
            ConnectionState.CONNECTING, ConnectionState.DISCONNECTING
        )

    @property
    def public_ip(self) -> str:
        if self.is_connected:
            return self.selected_server.ip
        return 'Real IP Exposed'

    def get_status(self) -> Dict:
        """Get current simulator status"""
        latest = self.traffic.latest()
        return {
            'state': self.state.name,
            'connected': self.is_connected,
            'server': {
                'id': self.selected_server.id,
                'country': self.selected_server.country,
                'city': self.selected_server.city,
                'ip': self.selected_server.ip,
            },
            'public_ip': self.public_ip,
            'duration': self.duration,
            'download_mbps': latest.download_mbps,
            'upload_mbps': latest.upload_mbps,
            'preferences': self.preferences.to_dict(),
        }
