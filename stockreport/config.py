from __future__ import annotations

from pathlib import Path
import json


BASE_DIR = Path(__file__).resolve().parent
OUT_DIR = Path.cwd() / "out"
DB_PATH = OUT_DIR / "reports.db"
PRIVATE_DIR = OUT_DIR / "reports"
DOWNLOAD_DIR = Path.home() / "Downloads"
STYLE_PRESET_PATH = BASE_DIR / "assets" / "report_style.json"

COMPANY_NAME = "Savla Foods & Cold Storage Pvt Ltd"

# Landscape A4, in points
PAGE_WIDTH = 842.0
PAGE_HEIGHT = 595.0
MARGIN = 20.0

TITLE_BLOCK_HEIGHT = 110.0
CONTINUATION_HEADER_HEIGHT = 40.0
FOOTER_BAND_HEIGHT = 30.0

BASE_FONT_SIZE = 9
LINE_HEIGHT_FACTOR = 1.2
ROW_HEIGHT_FACTOR = 5

EMPTY_CELL = "-"
INDEX_KEY = "#"


def load_style_preset() -> dict:
    with STYLE_PRESET_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def set_out_dir(path: Path) -> None:
    global OUT_DIR, DB_PATH, PRIVATE_DIR
    OUT_DIR = path
    DB_PATH = OUT_DIR / "reports.db"
    PRIVATE_DIR = OUT_DIR / "reports"
