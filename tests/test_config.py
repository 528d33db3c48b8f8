import json

from shooting_range.core.configio import DEFAULT_CONFIG, load_config, resolve_config, save_config

def test_config_save_load(tmp_path):
    cfg_path = tmp_path / "test_config.json"
    cfg = {"serial_port": "/dev/ttyUSB0", "db_path": "range.db"}

    save_config(cfg, cfg_path)
    assert cfg_path.exists()

    loaded = load_config(cfg_path)
    assert loaded == cfg

def test_load_nonexistent_config(tmp_path):
    assert load_config(tmp_path / "nope.json") is None

def test_resolve_config_fills_defaults(tmp_path):
    cfg_path = tmp_path / "partial.json"
    cfg_path.write_text(json.dumps({"serial_port": "COM4"}), encoding="utf-8")

    cfg = resolve_config(cfg_path)
    assert cfg["serial_port"] == "COM4"
    assert cfg["db_path"] == DEFAULT_CONFIG["db_path"]
    assert set(cfg) >= set(DEFAULT_CONFIG)

def test_resolve_config_ignores_malformed_file(tmp_path):
    cfg_path = tmp_path / "bad.json"
    cfg_path.write_text("[1, 2", encoding="utf-8")
    assert resolve_config(cfg_path) == DEFAULT_CONFIG

    cfg_path.write_text("[1, 2]", encoding="utf-8")
    assert resolve_config(cfg_path) == DEFAULT_CONFIG

def test_save_config_returns_written_path(tmp_path):
    cfg_path = tmp_path / "nested" / "config.json"
    assert save_config({"serial_port": "COM4"}, cfg_path) == cfg_path
    assert load_config(cfg_path) == {"serial_port": "COM4"}

def test_save_config_falls_back_when_dir_not_writable(tmp_path, monkeypatch):
    from shooting_range.core import configio
    monkeypatch.setattr(configio.tempfile, "gettempdir", lambda: str(tmp_path / "fallback_tmp"))

    def deny(self, *args, **kwargs):
        if "fallback_tmp" not in self.parts:
            raise PermissionError("read-only")
        return orig_mkdir(self, *args, **kwargs)

    orig_mkdir = configio.Path.mkdir
    monkeypatch.setattr(configio.Path, "mkdir", deny)
    written = save_config({"serial_port": "COM5"}, tmp_path / "locked" / "config.json")
    monkeypatch.undo()

    assert written == tmp_path / "fallback_tmp" / ".shooting_range" / "config.json"
    assert json.loads(written.read_text(encoding="utf-8")) == {"serial_port": "COM5"}
