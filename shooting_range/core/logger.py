# logger.py - application logger and per-session activation CSV log
import csv, time, uuid, logging
from pathlib import Path
from typing import Optional, Union

MS_PER_SEC = 1000.0
# --- App-wide logger ---
# Named logger for device, storage and session events.
# Defaults to console, but can be configured to log to file.
APP_LOGGER = logging.getLogger("shooting_range")
APP_LOGGER.setLevel(logging.INFO)
_formatter = logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s", datefmt="%H:%M:%S")
_console_handler = logging.StreamHandler()
_console_handler.setFormatter(_formatter)
APP_LOGGER.addHandler(_console_handler)

def configure_file_logging(log_path: Path, level=logging.DEBUG):
    """Configures file logging for APP_LOGGER."""
    # Remove existing file handlers first to prevent duplicates
    for handler in list(APP_LOGGER.handlers):
        if isinstance(handler, logging.FileHandler):
            APP_LOGGER.removeHandler(handler)
            handler.close()

    log_path = Path(log_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setFormatter(_formatter)
    file_handler.setLevel(level)
    APP_LOGGER.addHandler(file_handler)
    APP_LOGGER.info(f"File logging enabled at: {log_path}")

# --- Session activation CSV logger ---
CSV_FIELDS = [
    "session_id",
    "event_id",
    "event_uuid",
    "t_host_ms",
    "elapsed_s",
    "game_name",
    "node_id",
    "state",
    "outcome",
]

class SessionLogger:
    def __init__(self, session_dir: Union[Path,str], session_id: Optional[str] = None, game_name: str = ""):
        self.session_dir = Path(session_dir)
        self.session_dir.mkdir(parents=True, exist_ok=True)
        self.session_id = session_id or self._default_session_id()
        self.game_name = game_name
        self.event_id = 0
        try:
            self._f = open(self.session_dir / "activations.csv", "a", newline="", encoding="utf-8")
            self._w = csv.DictWriter(self._f, fieldnames=CSV_FIELDS)
            if self._f.tell() == 0:
                self._w.writeheader()
        except OSError as e:
            APP_LOGGER.error(f"Failed to open activations.csv for writing: {e}")
            self._f = None
            self._w = None

    def _default_session_id(self) -> str:
        ts = time.strftime("%Y%m%d_%H%M%S")
        return f"session_{ts}"

    def log_activation(
        self,
        host_time_s: float,
        elapsed_s: int,
        node_id: int,
        state: bool,
        outcome: str,
    ):
        """Append one dispatched command. host_time_s should come from a consistent clock."""
        if self._w is None:
            APP_LOGGER.warning("SessionLogger is not initialized, cannot log activation.")
            return

        self.event_id += 1
        row = {
            "session_id": self.session_id,
            "event_id": self.event_id,
            "event_uuid": str(uuid.uuid4()),
            "t_host_ms": int(round(host_time_s * MS_PER_SEC)),
            "elapsed_s": int(elapsed_s),
            "game_name": self.game_name,
            "node_id": int(node_id),
            "state": "true" if state else "false",
            "outcome": outcome,
        }
        try:
            self._w.writerow(row)
            self._f.flush()
        except (OSError, ValueError) as e:
            APP_LOGGER.error(f"Failed to write activation to CSV: {e}")

    def close(self):
        try:
            if self._f and not self._f.closed:
                self._f.close()
        except OSError as e:
            APP_LOGGER.error(f"Failed to close activations.csv: {e}")
