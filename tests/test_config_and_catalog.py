import random

import pytest
import yaml

from shieldflow.core.config_manager import ConfigManager
from shieldflow.core.server_catalog import ServerCatalog
from shieldflow.core.types import Preferences, Protocol, Server


def test_defaults_written_on_first_use(tmp_path):
    config = ConfigManager(tmp_path)

    assert config.settings_file.exists()
    assert config.get('simulation.connect_delay') == 2.0
    assert config.get('simulation.disconnect_delay') == 1.5
    assert config.get('selected_server') == 'us-east-1'
    assert config.load_preferences() == Preferences()


def test_settings_round_trip(tmp_path):
    config = ConfigManager(tmp_path)
    prefs = Preferences(protocol=Protocol.WIREGUARD, kill_switch=False,
                        auto_connect=True)
    config.save_preferences(prefs)
    config.set('selected_server', 'jp-tok-1')

    reloaded = ConfigManager(tmp_path)
    assert reloaded.load_preferences() == prefs
    assert reloaded.get('selected_server') == 'jp-tok-1'

    with open(config.settings_file) as f:
        raw = yaml.safe_load(f)
    assert raw['preferences']['protocol'] == 'WireGuard'


def test_partial_file_merged_with_defaults(tmp_path):
    (tmp_path / 'settings.yaml').write_text(
        "simulation:\n  connect_delay: 0.25\n"
    )
    config = ConfigManager(tmp_path)

    assert config.get('simulation.connect_delay') == 0.25
    assert config.get('simulation.tick_interval') == 1.0
    assert config.get('recommendation.model')


def test_invalid_yaml_falls_back_to_defaults(tmp_path):
    (tmp_path / 'settings.yaml').write_text("- just\n- a list\n")
    config = ConfigManager(tmp_path)
    assert config.get('log_level') == 'INFO'


def test_unknown_protocol_falls_back(tmp_path):
    config = ConfigManager(tmp_path)
    config.set('preferences.protocol', 'PPTP')
    assert config.load_preferences() == Preferences()


def test_get_missing_key_returns_default(tmp_path):
    config = ConfigManager(tmp_path)
    assert config.get('no.such.key', 'fallback') == 'fallback'


def test_api_key_prefers_environment(tmp_path, monkeypatch):
    config = ConfigManager(tmp_path)
    assert config.get_api_key() is None

    config.set('recommendation.api_key', 'from-file')
    assert config.get_api_key() == 'from-file'

    monkeypatch.setenv('GEMINI_API_KEY', 'from-env')
    assert config.get_api_key() == 'from-env'


def test_extra_servers_loaded(tmp_path):
    (tmp_path / 'servers.yaml').write_text(yaml.safe_dump({
        'servers': [{
            'id': 'ca-tor-1', 'country': 'Canada', 'city': 'Toronto',
            'ip': '99.1.2.3', 'load': 5, 'ping': 30,
            'features': ['Streaming'],
        }]
    }))
    servers = ConfigManager(tmp_path).load_servers()

    assert servers == [Server(
        id='ca-tor-1', country='Canada', city='Toronto', ip='99.1.2.3',
        load=5, ping=30, features=('Streaming',)
    )]


def test_preferences_validation():
    with pytest.raises(ValueError):
        Preferences.from_dict({'protocol': 'PPTP'})
    assert Preferences(protocol='OpenVPN').protocol is Protocol.OPENVPN


def test_catalog_lookup_and_default():
    catalog = ServerCatalog()
    assert len(catalog) == 6
    assert catalog.default.id == 'us-east-1'
    assert catalog.get('uk-lon-1').city == 'London'
    assert catalog.get('nope') is None
    assert 'de-fra-1' in catalog
    assert 'nope' not in catalog


def test_catalog_unknown_default_uses_first():
    assert ServerCatalog(default_id='nope').default.id == 'us-east-1'


def test_catalog_filters():
    catalog = ServerCatalog()
    assert [s.id for s in catalog.find_servers(feature='streaming')] == [
        'us-east-1', 'jp-tok-1'
    ]
    assert [s.id for s in catalog.find_servers(country='tokyo')] == ['jp-tok-1']
    assert {s.id for s in catalog.find_servers(premium=True)} == {
        'uk-lon-1', 'sg-sin-1', 'jp-tok-1'
    }


def test_catalog_best_and_random():
    catalog = ServerCatalog(rng=random.Random(0))
    assert catalog.get_best_server().id == 'sg-sin-1'
    assert catalog.get_best_server(exclude='sg-sin-1').id == 'de-fra-1'
    assert catalog.get_random_server() in catalog.get_all_servers()


def test_catalog_extend_replaces_by_id():
    catalog = ServerCatalog()
    moved = Server(id='us-east-1', country='United States', city='Boston',
                   ip='1.1.1.1', load=1, ping=1)
    catalog.extend([moved])

    assert len(catalog) == 6
    assert catalog.get('us-east-1').city == 'Boston'


@pytest.mark.parametrize("field", ['kill_switch', 'auto_connect'])
def test_quoted_booleans_rejected(field):
    with pytest.raises(ValueError):
        Preferences.from_dict({field: "false"})


def test_quoted_boolean_in_settings_falls_back(tmp_path):
    (tmp_path / 'settings.yaml').write_text(
        "preferences:\n  protocol: WireGuard\n  kill_switch: 'false'\n"
    )
    assert ConfigManager(tmp_path).load_preferences() == Preferences()
