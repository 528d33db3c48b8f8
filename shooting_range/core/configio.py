# configio.py - JSON settings for the range controller (port, database, logs)
import json, tempfile
from pathlib import Path
from shooting_range.core.logger import APP_LOGGER
from shooting_range.core import paths

DEFAULT_PATH = paths.APP_DATA_DIR / "config.json"
DEFAULT_SERIAL_PORT = "/dev/ttyACM0"

DEFAULT_CONFIG = {
    "serial_port": DEFAULT_SERIAL_PORT,
    "db_path": str(paths.DB_PATH),
    "log_path": str(paths.LOG_PATH),
    "session_dir": str(paths.SESSIONS_DIR),
}

def fallback_path(path: Path) -> Path:
    """Where a config lands when the data directory is not writable."""
    return Path(tempfile.gettempdir()) / paths.APP_DATA_DIR.name / Path(path).name

def writable_path(path: Path) -> Path:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        alt = fallback_path(path)
        APP_LOGGER.warning(f"Cannot create {path.parent}; writing config to {alt}")
        alt.parent.mkdir(parents=True, exist_ok=True)
        return alt
    return path

def save_config(cfg: dict, path: Path = DEFAULT_PATH) -> Path | None:
    """Write ``cfg`` as JSON; returns the file actually written, or None on failure."""
    target = writable_path(path)
    try:
        target.write_text(json.dumps(cfg, indent=2, sort_keys=True), encoding="utf-8")
    except OSError as e:
        APP_LOGGER.error(f"Could not write config {target}: {e}")
        return None
    return target

def load_config(path: Path = DEFAULT_PATH) -> dict | None:
    path = Path(path)
    candidates = [path, fallback_path(path)]
    source = next((p for p in candidates if p.exists()), path)
    try:
        return json.loads(source.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        APP_LOGGER.warning(f"No usable config at {source}: {e}")
        return None

def resolve_config(path: Path = DEFAULT_PATH) -> dict:
    """Load the config file and fill any missing keys from DEFAULT_CONFIG."""
    cfg = dict(DEFAULT_CONFIG)
    loaded = load_config(path)
    if isinstance(loaded, dict):
        cfg.update({k: v for k, v in loaded.items() if v is not None})
    elif loaded is not None:
        APP_LOGGER.warning(f"Ignoring config at {path}: expected a JSON object")
    return cfg
