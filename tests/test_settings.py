import json

from soundscape.config import DEFAULT_CAPTURE_INTERVAL_MS
from soundscape.models import AssistantMode
from soundscape.settings import DEFAULT_SETTINGS, SettingsStore


def test_missing_file_gives_defaults(tmp_path):
    store = SettingsStore(tmp_path / "settings.json")
    assert store.load() == DEFAULT_SETTINGS


def test_defaults_fill_missing_keys(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"safe_mode": True, "unknown_key": 1}))
    mode = SettingsStore(path).load()
    assert mode.safe_mode is True
    assert mode.voice_id == DEFAULT_SETTINGS.voice_id
    assert mode.capture_interval_ms == DEFAULT_SETTINGS.capture_interval_ms


def test_round_trip_and_reset(tmp_path):
    store = SettingsStore(tmp_path / "nested" / "settings.json")
    mode = AssistantMode(capture_interval_ms=2000, safe_mode=True, cue_verbosity="brief")
    store.save(mode)
    assert store.load() == mode

    store.reset()
    assert store.load() == DEFAULT_SETTINGS
    store.reset()


def test_corrupt_file_falls_back(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{{{")
    assert SettingsStore(path).load() == DEFAULT_SETTINGS


def test_interval_clamped():
    assert AssistantMode(capture_interval_ms=100).capture_interval_ms == 800
    assert AssistantMode(capture_interval_ms=9000).capture_interval_ms == 3000
    assert AssistantMode(capture_interval_ms=1500).updated(capture_interval_ms=50).capture_interval_ms == 800
    assert 800 <= AssistantMode().capture_interval_ms <= 3000
    assert DEFAULT_CAPTURE_INTERVAL_MS > 0


def test_bad_verbosity_normalized():
    assert AssistantMode(cue_verbosity="chatty").cue_verbosity == "normal"
