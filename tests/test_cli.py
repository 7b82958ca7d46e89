from io import StringIO

import pytest
from rich.console import Console

from shieldflow.cli.interface import ShieldFlowCLI, build_parser, main
from shieldflow.core.config_manager import ConfigManager
from shieldflow.core.types import Protocol


@pytest.fixture
def config(tmp_path):
    return ConfigManager(tmp_path)


@pytest.fixture
def output():
    return Console(file=StringIO(), width=200, color_system=None)


@pytest.fixture
def cli(config, output):
    return ShieldFlowCLI(config, output=output)


def printed(output):
    return output.file.getvalue()


def test_list_servers_marks_selection(cli, output):
    cli.list_servers()
    text = printed(output)

    assert "us-east-1 *" in text
    assert "185.20.12.4" in text
    assert "Showing 6 of 6 servers" in text


def test_list_servers_filter_without_match(cli, output):
    cli.list_servers(country="Atlantis")
    assert "No servers found" in printed(output)


def test_settings_updates_only_given_fields(cli, config, output):
    prefs = cli.settings(protocol='WireGuard', kill_switch=False)

    assert prefs.protocol == Protocol.WIREGUARD
    assert prefs.kill_switch is False
    assert prefs.auto_connect is False
    assert ConfigManager(config.config_dir).load_preferences() == prefs
    assert "Preferences saved" in printed(output)


def test_recommend_without_key_uses_default(cli, config, output):
    rec = cli.recommend("Low ping gaming", apply=True)

    assert rec.fallback
    assert rec.recommended_server_id == 'us-east-1'
    assert "AI recommendation unavailable, using United States" in printed(output)
    assert config.get('selected_server') == 'us-east-1'


def test_connect_unknown_server(cli, output):
    assert cli.connect(server_id='mars-1') is False
    assert "Unknown server: mars-1" in printed(output)


@pytest.mark.timeout(10)
def test_connect_runs_full_session(config, output):
    config.set('simulation.connect_delay', 0.05)
    config.set('simulation.disconnect_delay', 0.05)
    config.set('simulation.tick_interval', 0.02)
    cli = ShieldFlowCLI(config, output=output)

    assert cli.connect(server_id='de-fra-1', protocol='OpenVPN', duration=0.1)

    text = printed(output)
    assert "Connecting to Germany (Frankfurt)..." in text
    assert "Protocol: OpenVPN" in text
    assert "Encrypted tunnel established. IP: 190.12.44.11" in text
    assert "Disconnected successfully." in text


def test_parser_boolean_flags():
    args = build_parser().parse_args(
        ['settings', '--no-kill-switch', '--protocol', 'IKEv2']
    )
    assert args.kill_switch is False
    assert args.auto_connect is None
    assert args.protocol == 'IKEv2'


def test_parser_rejects_unknown_protocol():
    with pytest.raises(SystemExit):
        build_parser().parse_args(['connect', '--protocol', 'PPTP'])


def test_main_without_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_main_settings_command(tmp_path):
    code = main([
        '--config-dir', str(tmp_path),
        '--log-file', str(tmp_path / 'cli.log'),
        'settings', '--auto-connect',
    ])
    assert code == 0
    assert ConfigManager(tmp_path).load_preferences().auto_connect is True


def test_session_time_formatting():
    from shieldflow.core.types import ConnectionState
    from shieldflow.utils.formatting import (
        format_duration, format_rate, format_session_time
    )

    assert format_duration(3725) == "01:02:05"
    assert format_session_time(ConnectionState.CONNECTING, 12) == "--:--:--"
    assert format_session_time(ConnectionState.CONNECTED, 5) == "00:00:05"
    assert format_rate(42.26) == "42.3 Mb/s"
