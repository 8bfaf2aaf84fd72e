from unittest.mock import MagicMock

import pytest

from agent import MarketAgent
from alert_state_store import AlertStateStore
from alerts import detect
from models import AlertConfig, AlertDetectorState


def test_missing_file_loads_nothing(tmp_path):
    assert AlertStateStore(str(tmp_path / "state.json")).load() is None


def test_save_then_load(tmp_path, make_token):
    store = AlertStateStore(str(tmp_path / "state.json"))
    _, state = detect([make_token("ETH", "0x1", price=3000, volume=10)], AlertConfig(), AlertDetectorState())

    assert store.save(state) is True
    loaded = store.load()

    assert loaded.last_volume_by_address == {"0x1": 10.0}
    assert loaded.known_addresses == {"0x1"}
    assert not (tmp_path / "state.json.tmp").exists()


def test_corrupt_file_loads_nothing(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("[not a dict")

    assert AlertStateStore(str(path)).load() is None


def test_clear(tmp_path):
    path = tmp_path / "state.json"
    store = AlertStateStore(str(path))
    store.save(AlertDetectorState())

    store.clear()

    assert not path.exists()


@pytest.mark.parametrize("body", ['[]', '{"lastPrices": [1, 2]}', '{"lastVolumes": "x"}', '{"lastCheck": 123}'])
def test_wrong_shape_loads_nothing(tmp_path, body):
    path = tmp_path / "state.json"
    path.write_text(body)

    assert AlertStateStore(str(path)).load() is None


def test_agent_starts_fresh_over_wrong_shape_file(tmp_path, base_config):
    path = tmp_path / "state.json"
    path.write_text("[]")
    base_config.update({"PERSIST_ALERT_STATE": True, "ALERT_STATE_FILE": str(path)})

    agent = MarketAgent(base_config, fetcher=MagicMock())

    assert agent.detector.state.known_addresses == set()
