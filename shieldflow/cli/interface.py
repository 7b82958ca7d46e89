"""
Command-line interface for ShieldFlow
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from .. import __version__
from ..core.clock import AsyncioClock
from ..core.config_manager import ConfigManager
from ..core.connection_simulator import ConnectionSimulator
from ..core.constants import APP_NAME
from ..core.server_catalog import ServerCatalog
from ..core.types import ConnectionState, Preferences, Protocol
from ..services.assistant import describe_recommendation, resolve_server
from ..services.recommendation import RecommendationClient
from ..utils.formatting import (
    STATE_LABELS, STATE_STYLES, SEVERITY_STYLES, format_duration, format_rate
)
from ..utils.logging_setup import get_logger, setup_file_logging, set_logging_level

console = Console()
logger = get_logger(__name__)


class ShieldFlowCLI:
    """Command-line interface for the simulated VPN client"""

    def __init__(self, config_manager: Optional[ConfigManager] = None,
                 output: Optional[Console] = None):
        self.config = config_manager or ConfigManager()
        self.console = output or console
        self.catalog = ServerCatalog(
            default_id=self.config.get('recommendation.default_server')
        )
        self.catalog.extend(self.config.load_servers())

    def list_servers(self, country: Optional[str] = None,
                     feature: Optional[str] = None):
        """List catalog servers"""
        servers = self.catalog.find_servers(country=country, feature=feature)

        if not servers:
            self.console.print("[yellow]No servers found[/yellow]")
            return

        selected = self.config.get('selected_server')

        table = Table(title="Available VPN Servers", box=box.ROUNDED)
        table.add_column("ID", style="cyan")
        table.add_column("Country", style="green")
        table.add_column("City", style="white")
        table.add_column("IP", style="blue")
        table.add_column("Load", style="red")
        table.add_column("Ping", style="cyan")
        table.add_column("Features", style="magenta")
        table.add_column("Premium", style="yellow")

        for server in servers:
            marker = " *" if server.id == selected else ""
            table.add_row(
                server.id + marker,
                f"{server.flag} {server.country}".strip(),
                server.city,
                server.ip,
                f"{server.load}%",
                f"{server.ping}ms",
                ", ".join(server.features),
                "✓" if server.premium else ""
            )

        self.console.print(table)
        self.console.print(
            f"[dim]Showing {len(servers)} of {len(self.catalog)} servers "
            f"(* selected)[/dim]"
        )

    def connect(self, server_id: Optional[str] = None,
                protocol: Optional[str] = None,
                duration: float = 10.0) -> bool:
        """Run a simulated session in real time"""
        server = None
        if server_id:
            server = self.catalog.get(server_id)
            if server is None:
                self.console.print(f"[red]Unknown server: {server_id}[/red]")
                return False

        preferences = self.config.load_preferences()
        if protocol:
            preferences = Preferences(
                protocol=protocol,
                kill_switch=preferences.kill_switch,
                auto_connect=preferences.auto_connect,
            )

        try:
            return asyncio.run(self._run_session(server, preferences, duration))
        except KeyboardInterrupt:
            self.console.print("\n[yellow]Session interrupted[/yellow]")
            return False

    async def _run_session(self, server, preferences, duration: float) -> bool:
        simulator = ConnectionSimulator.from_config(
            self.config, self.catalog, AsyncioClock()
        )
        finished = asyncio.Event()
        hang_up = []

        def on_log(entry):
            style = SEVERITY_STYLES[entry.severity]
            self.console.print(
                f"[dim]\\[{entry.timestamp}][/dim] [{style}]{entry.message}[/{style}]"
            )

        def on_state(old_state, new_state, message):
            label = STATE_LABELS[new_state]
            self.console.print(
                f"[{STATE_STYLES[new_state]}]● {label}[/{STATE_STYLES[new_state]}]"
            )
            if new_state == ConnectionState.CONNECTED:
                hang_up.append(
                    simulator.clock.call_later(duration, simulator.disconnect)
                )
            elif (new_state == ConnectionState.DISCONNECTED and
                  old_state == ConnectionState.DISCONNECTING):
                finished.set()

        def on_traffic(point):
            self.console.print(
                f"[dim]{format_duration(simulator.duration)}[/dim]  "
                f"[green]↓ {format_rate(point.download_mbps)}[/green]  "
                f"[blue]↑ {format_rate(point.upload_mbps)}[/blue]"
            )

        simulator.on_log_appended(on_log)
        simulator.on_state_change(on_state)
        simulator.on_traffic_sample(on_traffic)

        try:
            simulator.connect(server, preferences)
            await finished.wait()
            return True
        finally:
            # Also runs on Ctrl+C and SIGTERM
            for timer in hang_up:
                timer.cancel()
            simulator.dispose()

    async def _ask(self, query: str):
        client = RecommendationClient(
            catalog=self.catalog,
            api_key=self.config.get_api_key(),
            model=self.config.get('recommendation.model'),
            default_server_id=self.catalog.default.id,
        )
        return await client.recommend(query)

    def recommend(self, query: str, apply: bool = False):
        """Ask the AI assistant for a server"""
        with self.console.status("Asking Gemini..."):
            recommendation = asyncio.run(self._ask(query))

        server = resolve_server(self.catalog, recommendation)
        message, severity = describe_recommendation(
            self.catalog, query, recommendation
        )
        style = SEVERITY_STYLES[severity]

        self.console.print(Panel.fit(
            f"[bold]Server:[/bold] {server.flag} {server.country} "
            f"({server.city}) [{server.id}]\n"
            f"[bold]Reason:[/bold] {recommendation.reason}",
            title="Recommendation",
            border_style="yellow" if recommendation.fallback else "green"
        ))
        self.console.print(f"[{style}]{message}[/{style}]")

        if apply:
            self.config.set('selected_server', server.id)
            self.console.print(
                f"[green]✓ Applied AI recommendation: {server.country}[/green]"
            )
        return recommendation

    def settings(self, protocol: Optional[str] = None,
                 kill_switch: Optional[bool] = None,
                 auto_connect: Optional[bool] = None):
        """Show or update saved preferences"""
        preferences = self.config.load_preferences()

        if protocol is not None or kill_switch is not None or auto_connect is not None:
            preferences = Preferences(
                protocol=protocol or preferences.protocol,
                kill_switch=(preferences.kill_switch
                             if kill_switch is None else kill_switch),
                auto_connect=(preferences.auto_connect
                              if auto_connect is None else auto_connect),
            )
            self.config.save_preferences(preferences)
            self.console.print("[green]✓ Preferences saved[/green]")

        table = Table(title="Preferences", box=box.ROUNDED)
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="white")
        table.add_row("Protocol", preferences.protocol.value)
        table.add_row("Kill Switch", "On" if preferences.kill_switch else "Off")
        table.add_row("Auto Connect", "On" if preferences.auto_connect else "Off")
        table.add_row("Selected Server", str(self.config.get('selected_server')))
        self.console.print(table)
        return preferences


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='shieldflow',
        description=f'{APP_NAME} - simulated VPN client dashboard',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s tui
  %(prog)s list --feature Streaming
  %(prog)s connect --server jp-tok-1 --duration 5
  %(prog)s recommend "Low ping gaming" --apply
  %(prog)s settings --protocol WireGuard --no-kill-switch
        """
    )
    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {__version__}')
    parser.add_argument('--config-dir', type=Path,
                        help='Configuration directory')
    parser.add_argument('--log-file', type=Path, help='Path to log file')
    parser.add_argument(
        '--log-level',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Set logging level'
    )

    subparsers = parser.add_subparsers(
        dest='command',
        help='Command to execute'
    )

    subparsers.add_parser('tui', help='Launch the dashboard')

    list_parser = subparsers.add_parser('list', help='List available servers')
    list_parser.add_argument('--country', help='Filter by country or city')
    list_parser.add_argument('--feature', help='Filter by feature tag')

    connect_parser = subparsers.add_parser(
        'connect', help='Run a simulated session'
    )
    connect_parser.add_argument('--server', help='Server id')
    connect_parser.add_argument(
        '--protocol',
        choices=[p.value for p in Protocol],
        help='VPN protocol'
    )
    connect_parser.add_argument(
        '--duration', type=float, default=10.0,
        help='Seconds to stay connected'
    )

    recommend_parser = subparsers.add_parser(
        'recommend', help='Ask the AI assistant for a server'
    )
    recommend_parser.add_argument('query', help='What do you want to do?')
    recommend_parser.add_argument(
        '--apply', action='store_true',
        help='Save the recommended server as selected'
    )

    settings_parser = subparsers.add_parser(
        'settings', help='Show or change preferences'
    )
    settings_parser.add_argument(
        '--protocol', choices=[p.value for p in Protocol]
    )
    settings_parser.add_argument(
        '--kill-switch', action=argparse.BooleanOptionalAction, default=None
    )
    settings_parser.add_argument(
        '--auto-connect', action=argparse.BooleanOptionalAction, default=None
    )

    return parser


def main(argv=None) -> int:
    """Main entry point for the CLI"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config = ConfigManager(args.config_dir)
    setup_file_logging(
        None, args.log_file or Path(config.get('log_file')), args.log_level
    )
    set_logging_level(args.log_level)

    try:
        if args.command == 'tui':
            from ..ui.app import main as tui_main
            tui_main(config)
            return 0

        cli = ShieldFlowCLI(config)

        if args.command == 'list':
            cli.list_servers(country=args.country, feature=args.feature)
        elif args.command == 'connect':
            if not cli.connect(
                server_id=args.server,
                protocol=args.protocol,
                duration=args.duration
            ):
                return 1
        elif args.command == 'recommend':
            cli.recommend(args.query, apply=args.apply)
        elif args.command == 'settings':
            cli.settings(
                protocol=args.protocol,
                kill_switch=args.kill_switch,
                auto_connect=args.auto_connect
            )
        return 0

    except KeyboardInterrupt:
        console.print("\nOperation cancelled by user")
        return 0
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
