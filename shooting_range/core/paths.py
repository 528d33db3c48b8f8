# shooting_range/core/paths.py
import sys
from pathlib import Path

# Frozen builds unpack bundled assets under sys._MEIPASS; source checkouts use the repo root.
PROJECT_ROOT = Path(__file__).resolve().parents[2]

def get_resource_path(relative_path: str) -> Path:
    bundle_dir = getattr(sys, "_MEIPASS", None)
    base = Path(bundle_dir) if bundle_dir else PROJECT_ROOT
    return base / relative_path

APP_DATA_DIR = Path.home() / ".shooting_range"
DB_PATH = APP_DATA_DIR / "shooting-range.db"
LOG_PATH = APP_DATA_DIR / "shooting-range.log"
SESSIONS_DIR = APP_DATA_DIR / "sessions"

ASSETS_DIR = get_resource_path("assets")

def target_image_path(image_num: int) -> Path:
    return ASSETS_DIR / f"ShootingTarget_graphics{int(image_num)}.png"
