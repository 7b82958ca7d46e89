"""
ShieldFlow - Terminal dashboard
Main TUI application with connection status, traffic chart, servers,
AI assistant and settings tabs
"""

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import (
    Header, Footer, Button, Static, Label,
    DataTable, TabbedContent, TabPane, RichLog,
    Sparkline, Switch, Input, Select
)
from textual.binding import Binding
from textual import work

from datetime import datetime
from typing import Optional, List
import logging

from .dialogs import ConfirmDialog, AboutDialog

from ..core.clock import AsyncioClock, Clock
from ..core.config_manager import ConfigManager
from ..core.connection_simulator import ConnectionSimulator
from ..core.constants import APP_NAME, PRESET_QUERIES
from ..core.server_catalog import ServerCatalog
from ..core.types import (
    ConnectionState, LogEntry, Preferences, Protocol, Recommendation, Server,
    TrafficSample
)
from ..services.assistant import (
    record_recommendation, resolve_server, apply_recommendation
)
from ..services.recommendation import RecommendationClient
from ..utils.formatting import (
    STATE_LABELS, SEVERITY_STYLES, format_session_time, format_rate
)

logger = logging.getLogger(__name__)

STATE_CLASSES = {
    ConnectionState.DISCONNECTED: "status-error",
    ConnectionState.CONNECTING: "status-warning",
    ConnectionState.CONNECTED: "status-good",
    ConnectionState.DISCONNECTING: "status-default",
}


class ConnectionPanel(Static):
    """Current session card with the connect button"""

    def compose(self) -> ComposeResult:
        with Container(classes="connection-panel"):
            yield Static("Current Session", classes="panel-title")
            yield Label("N/A", id="session-server")
            yield Label("Unsecured", id="session-state", classes="status-error")
            yield Label("--:--:--", id="session-time")
            yield Button("Quick Connect", id="btn-toggle", variant="success")

    def update_server(self, server: Server):
        self.query_one("#session-server", Label).update(
            f"{server.flag} {server.country} - {server.city}".strip()
        )

    def update_state(self, state: ConnectionState, busy: bool):
        label = self.query_one("#session-state", Label)
        label.update(STATE_LABELS[state])
        label.remove_class(*STATE_CLASSES.values())
        label.add_class(STATE_CLASSES[state])

        button = self.query_one("#btn-toggle", Button)
        button.disabled = busy
        if state == ConnectionState.CONNECTED:
            button.label = "Disconnect"
            button.variant = "error"
        else:
            button.label = "Quick Connect"
            button.variant = "success"

    def update_time(self, state: ConnectionState, seconds: int):
        self.query_one("#session-time", Label).update(
            format_session_time(state, seconds)
        )


class TrafficPanel(Static):
    """Download and upload sparklines"""

    def compose(self) -> ComposeResult:
        with Container(classes="traffic-panel"):
            with Horizontal(classes="panel-header"):
                yield Static("Network Traffic", classes="panel-title")
                yield Label("↓ 0.0 Mb/s", id="rate-download", classes="rate-down")
                yield Label("↑ 0.0 Mb/s", id="rate-upload", classes="rate-up")
            yield Sparkline([0], summary_function=max, id="spark-download")
            yield Sparkline([0], summary_function=max, id="spark-upload")

    def update_samples(self, samples: List[TrafficSample]):
        self.query_one("#spark-download", Sparkline).data = [
            s.download_mbps for s in samples
        ]
        self.query_one("#spark-upload", Sparkline).data = [
            s.upload_mbps for s in samples
        ]
        latest = samples[-1]
        self.query_one("#rate-download", Label).update(
            f"↓ {format_rate(latest.download_mbps)}"
        )
        self.query_one("#rate-upload", Label).update(
            f"↑ {format_rate(latest.upload_mbps)}"
        )


class LogViewer(Static):
    """Connection log widget"""

    def compose(self) -> ComposeResult:
        with Container(classes="log-viewer"):
            yield Static("Connection Log", classes="panel-title")
            yield RichLog(id="activity-log", markup=True, wrap=True)

            with Horizontal(classes="button-row"):
                yield Button("Clear Log", id="btn-clear-log", variant="default")
                yield Button("Save Log", id="btn-save-log", variant="primary")

    def write_entry(self, entry: LogEntry):
        style = SEVERITY_STYLES[entry.severity]
        self.query_one("#activity-log", RichLog).write(
            f"[dim]\\[{entry.timestamp}][/dim] [{style}]{entry.message}[/{style}]"
        )

    def clear(self):
        self.query_one("#activity-log", RichLog).clear()


class ServerList(Static):
    """Server list widget"""

    def compose(self) -> ComposeResult:
        with Container(classes="server-list"):
            yield Static("Select Location", classes="panel-title")
            yield Static(
                "Choose a secure server to route your traffic.",
                classes="panel-hint"
            )

            table = DataTable(id="server-table", cursor_type="row")
            table.add_columns(
                "ID", "Country", "City", "Load", "Ping", "Features", "Premium"
            )
            yield table

    def populate_servers(self, servers: List[Server], selected_id: str):
        """Populate server table"""
        table = self.query_one("#server-table", DataTable)
        table.clear()

        for server in servers:
            table.add_row(
                server.id + (" *" if server.id == selected_id else ""),
                f"{server.flag} {server.country}".strip(),
                server.city,
                f"{server.load}%",
                f"{server.ping}ms",
                ", ".join(server.features),
                "✓" if server.premium else "",
                key=server.id
            )

    def set_enabled(self, enabled: bool):
        self.query_one("#server-table", DataTable).disabled = not enabled


class AssistantPanel(Static):
    """Smart Connect AI tab"""

    def compose(self) -> ComposeResult:
        with Container(classes="assistant-panel"):
            yield Static("Smart Connect AI", classes="panel-title")
            yield Static(
                "Ask Gemini to find the perfect server for your needs.",
                classes="panel-hint"
            )

            with Horizontal(classes="control-row"):
                yield Input(
                    placeholder="e.g., I want to watch Anime in high quality",
                    id="input-ai-query"
                )
                yield Button("Ask AI", id="btn-ask-ai", variant="primary")

            with Horizontal(classes="button-row"):
                for i, preset in enumerate(PRESET_QUERIES):
                    yield Button(preset, id=f"btn-preset-{i}", classes="preset")

            yield Static("", id="ai-result")
            yield Button(
                "Select & Go to Dashboard", id="btn-apply-ai",
                variant="success", disabled=True
            )

    def show_recommendation(self, server: Server,
                            recommendation: Recommendation):
        self.query_one("#ai-result", Static).update(
            f"[bold green]Recommended: {server.flag} {server.country}[/]\n"
            f"{recommendation.reason}"
        )

    def show_loading(self):
        self.query_one("#ai-result", Static).update("[dim]Thinking...[/dim]")


class SettingsPanel(Static):
    """Preferences form"""

    def __init__(self, preferences: Preferences):
        super().__init__()
        self.preferences = preferences

    def compose(self) -> ComposeResult:
        with Container(classes="settings-panel"):
            yield Static("Settings", classes="panel-title")

            with Horizontal(classes="control-row"):
                yield Label("VPN Protocol:", classes="control-label")
                yield Select(
                    [
                        ("IKEv2 (Fastest)", Protocol.IKEV2.value),
                        ("WireGuard (Modern)", Protocol.WIREGUARD.value),
                        ("OpenVPN (Stable)", Protocol.OPENVPN.value),
                    ],
                    value=self.preferences.protocol.value,
                    allow_blank=False,
                    id="select-protocol"
                )

            with Horizontal(classes="control-row"):
                yield Label("Kill Switch:", classes="control-label")
                yield Switch(value=self.preferences.kill_switch, id="switch-killswitch")

            with Horizontal(classes="control-row"):
                yield Label("Auto Connect:", classes="control-label")
                yield Switch(value=self.preferences.auto_connect, id="switch-autoconnect")

            yield Static(
                "Architecture Note: standard terminals and browsers cannot "
                "manipulate TUN/TAP interfaces. In production this panel "
                "would talk to a local system daemon that establishes the "
                "OpenVPN/WireGuard tunnel.",
                classes="architecture-note"
            )

    def read_preferences(self) -> Preferences:
        return Preferences(
            protocol=self.query_one("#select-protocol", Select).value,
            kill_switch=self.query_one("#switch-killswitch", Switch).value,
            auto_connect=self.query_one("#switch-autoconnect", Switch).value,
        )


class ShieldFlowTUI(App):
    """Main ShieldFlow TUI Application"""

    CSS = """
    Screen {
        background: $surface;
    }

    .connection-panel, .traffic-panel, .log-viewer, .server-list,
    .assistant-panel, .settings-panel {
        border: solid $primary;
        padding: 1;
        margin: 1;
        height: auto;
    }

    .panel-title {
        color: $accent;
        text-style: bold;
        margin-bottom: 1;
        width: 1fr;
    }

    .panel-hint {
        color: $text-muted;
        margin-bottom: 1;
    }

    .panel-header {
        height: auto;
    }

    #session-state, #session-time, #session-server {
        width: 100%;
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    #btn-toggle {
        width: 100%;
    }

    .status-good {
        color: $success;
    }

    .status-warning {
        color: $warning;
    }

    .status-error {
        color: $error;
    }

    .status-default {
        color: $text-muted;
    }

    .rate-down {
        color: $success;
        margin-left: 2;
    }

    .rate-up {
        color: $primary;
        margin-left: 2;
    }

    Sparkline {
        height: 3;
        margin-bottom: 1;
    }

    RichLog {
        height: 12;
        border: solid $primary-darken-2;
        margin-bottom: 1;
    }

    DataTable {
        height: auto;
        max-height: 20;
        margin-bottom: 1;
    }

    .button-row, .control-row {
        height: auto;
        margin-bottom: 1;
    }

    .button-row Button {
        margin-right: 1;
    }

    .control-label {
        width: 20;
        color: $text-muted;
    }

    Input {
        width: 1fr;
    }

    #ai-result {
        margin: 1 0;
    }

    .architecture-note {
        color: $warning;
        border: solid $warning;
        padding: 1;
        margin-top: 1;
    }

    TabbedContent {
        height: 100%;
    }

    TabPane {
        padding: 0;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("c", "toggle_connection", "Connect/Disconnect"),
        Binding("d", "show_tab('dashboard')", "Dashboard"),
        Binding("s", "show_tab('servers')", "Servers"),
        Binding("a", "show_tab('assistant')", "AI"),
        Binding("p", "show_tab('settings')", "Settings"),
        Binding("l", "save_log", "Save Log"),
        Binding("f1", "show_about", "About"),
    ]

    TITLE = APP_NAME
    SUB_TITLE = "Real IP Exposed"

    def __init__(self, config_manager: Optional[ConfigManager] = None,
                 clock: Optional[Clock] = None,
                 catalog: Optional[ServerCatalog] = None,
                 recommender: Optional[RecommendationClient] = None):
        super().__init__()
        self.config_manager = config_manager or ConfigManager()
        self.clock = clock
        self.catalog = catalog or ServerCatalog(
            default_id=self.config_manager.get('recommendation.default_server')
        )
        if catalog is None:
            self.catalog.extend(self.config_manager.load_servers())
        self.recommender = recommender
        self.simulator: Optional[ConnectionSimulator] = None
        self.last_recommendation: Optional[Server] = None

    def compose(self) -> ComposeResult:
        yield Header()

        with TabbedContent(initial="dashboard"):
            with TabPane("Dashboard", id="dashboard"):
                with Horizontal():
                    yield ConnectionPanel()
                    with Vertical():
                        yield TrafficPanel()
                        yield LogViewer()

            with TabPane("Servers", id="servers"):
                yield ServerList()

            with TabPane("AI Assistant", id="assistant"):
                yield AssistantPanel()

            with TabPane("Settings", id="settings"):
                yield SettingsPanel(self.config_manager.load_preferences())

        yield Footer()

    def on_mount(self) -> None:
        """Build the simulator and wire it to the widgets"""
        logger.info("ShieldFlow TUI started")

        if self.clock is None:
            self.clock = AsyncioClock()

        self.simulator = ConnectionSimulator.from_config(
            self.config_manager, self.catalog, self.clock
        )
        if self.recommender is None:
            self.recommender = RecommendationClient(
                catalog=self.catalog,
                api_key=self.config_manager.get_api_key(),
                model=self.config_manager.get('recommendation.model'),
            )

        self.simulator.on_state_change(self.on_state_change)
        self.simulator.on_log_appended(self.on_log_entry)
        self.simulator.on_traffic_sample(self.on_traffic_sample)
        self.simulator.register_callback('duration', self.on_duration)

        self.refresh_servers()
        self.query_one(ConnectionPanel).update_server(
            self.simulator.selected_server
        )
        self.render_state()

    def on_unmount(self) -> None:
        if self.simulator:
            self.simulator.dispose()
        logger.info("ShieldFlow TUI stopped")

    # -- simulator callbacks ------------------------------------------------

    def on_state_change(self, old_state, new_state, message):
        logger.info(f"State changed: {old_state.name} -> {new_state.name}")
        self.render_state()

    def on_log_entry(self, entry: LogEntry):
        self.query_one(LogViewer).write_entry(entry)

    def on_traffic_sample(self, sample: TrafficSample):
        self.query_one(TrafficPanel).update_samples(self.simulator.traffic.samples)

    def on_duration(self, seconds: int):
        self.query_one(ConnectionPanel).update_time(self.simulator.state, seconds)

    def render_state(self):
        """Re-render everything derived from the connection state"""
        state = self.simulator.state
        panel = self.query_one(ConnectionPanel)
        panel.update_state(state, self.simulator.is_busy)
        panel.update_time(state, self.simulator.duration)
        self.query_one(TrafficPanel).update_samples(self.simulator.traffic.samples)
        self.query_one(ServerList).set_enabled(
            state == ConnectionState.DISCONNECTED
        )
        self.query_one("#btn-apply-ai", Button).disabled = (
            self.last_recommendation is None or
            state != ConnectionState.DISCONNECTED
        )
        self.sub_title = self.simulator.public_ip

    def refresh_servers(self):
        self.query_one(ServerList).populate_servers(
            self.catalog.get_all_servers(), self.simulator.selected_server.id
        )

    # -- user intents ---------------------------------------------------------

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button presses"""
        button_id = event.button.id or ""

        if button_id == "btn-toggle":
            self.action_toggle_connection()
        elif button_id == "btn-clear-log":
            self.simulator.log_sink.clear()
            self.query_one(LogViewer).clear()
        elif button_id == "btn-save-log":
            self.action_save_log()
        elif button_id == "btn-ask-ai":
            self.ask_assistant(self.query_one("#input-ai-query", Input).value)
        elif button_id.startswith("btn-preset-"):
            preset = PRESET_QUERIES[int(button_id.rsplit("-", 1)[1])]
            self.query_one("#input-ai-query", Input).value = preset
        elif button_id == "btn-apply-ai":
            self.apply_assistant_choice()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "input-ai-query":
            self.ask_assistant(event.value)

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        server = self.catalog.get(event.row_key.value)
        if server and self.select_server(server):
            self.action_show_tab("dashboard")

    def on_select_changed(self, event: Select.Changed) -> None:
        self.update_preferences()

    def on_switch_changed(self, event: Switch.Changed) -> None:
        self.update_preferences()

    def select_server(self, server: Server) -> bool:
        if not self.simulator.select_server(server):
            return False
        self.config_manager.set('selected_server', server.id)
        self.query_one(ConnectionPanel).update_server(server)
        self.refresh_servers()
        return True

    def update_preferences(self):
        if self.simulator is None:
            return
        preferences = self.query_one(SettingsPanel).read_preferences()
        if preferences == self.simulator.preferences:
            return
        self.simulator.set_preferences(preferences)
        self.config_manager.save_preferences(preferences)

    @work(exclusive=True)
    async def ask_assistant(self, query: str) -> None:
        """Ask the recommendation service without blocking the UI"""
        query = query.strip()
        if not query:
            return

        panel = self.query_one(AssistantPanel)
        panel.show_loading()

        recommendation = await self.recommender.recommend(query)
        server = resolve_server(self.catalog, recommendation)
        record_recommendation(
            self.simulator.log_sink, self.catalog, query, recommendation
        )

        self.last_recommendation = server
        panel.show_recommendation(server, recommendation)
        self.render_state()

    def apply_assistant_choice(self):
        server = self.last_recommendation
        if server is None:
            return
        if apply_recommendation(self.simulator, server):
            self.config_manager.set('selected_server', server.id)
            self.query_one(ConnectionPanel).update_server(server)
            self.refresh_servers()
            self.action_show_tab("dashboard")

    # -- actions ---------------------------------------------------------------

    def action_toggle_connection(self) -> None:
        """Connect or disconnect; ignored while a transition is running"""
        if self.simulator:
            self.simulator.toggle()

    def action_show_tab(self, tab: str) -> None:
        self.query_one(TabbedContent).active = tab

    def action_save_log(self) -> None:
        """Save the connection log to a file"""
        log_file = (
            self.config_manager.config_dir / 'logs' /
            f"session_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
        )
        try:
            self.simulator.log_sink.export(log_file)
            self.notify(f"Log saved to {log_file}")
        except OSError as e:
            logger.error(f"Failed to save log: {e}", exc_info=True)
            self.notify(f"Failed to save log: {e}", severity="error")

    def action_show_about(self) -> None:
        self.push_screen(AboutDialog())

    async def action_quit(self) -> None:
        """Quit, asking first when a session is active"""
        if self.simulator is None or self.simulator.state == ConnectionState.DISCONNECTED:
            self.exit()
            return

        def _confirmed(confirmed: bool) -> None:
            if confirmed:
                self.simulator.dispose()
                self.exit()

        self.push_screen(
            ConfirmDialog("Quit", "A session is active. Disconnect and quit?"),
            _confirmed
        )


def main(config_manager: Optional[ConfigManager] = None):
    """Main entry point for TUI"""
    app = ShieldFlowTUI(config_manager)
    try:
        app.run()
    finally:
        if app.simulator:
            app.simulator.dispose()


if __name__ == "__main__":
    main()
