# photostamp/config.py
import os
from pathlib import Path

APP_NAME = "Photostamp - logo & date stamper"

APP_DIR = Path(os.environ.get("PHOTOSTAMP_HOME", Path.home() / ".photostamp"))
PRESETS_FILE = APP_DIR / "presets.json"
LOGOS_DIR = APP_DIR / "logos"

# slider ranges, values outside are clamped
LOGO_SCALE_RANGE = (0.05, 1.0)
LOGO_OPACITY_RANGE = (0.1, 1.0)
DATE_SCALE_RANGE = (0.1, 3.0)
DATE_OPACITY_RANGE = (0.1, 1.0)
QUALITY_RANGE = (10, 100)

DEFAULT_LOGO_POSITION = (0.02, 0.02)
DEFAULT_LOGO_SCALE = 0.3
DEFAULT_LOGO_OPACITY = 1.0

DEFAULT_DATE_POSITION = (0.02, 0.06)
DEFAULT_DATE_SCALE = 0.15
DEFAULT_DATE_OPACITY = 1.0
DEFAULT_DATE_FORMAT = "YY.MM"
DEFAULT_FONT_FAMILY = "Arial"
DEFAULT_FONT_SIZE = 24
DEFAULT_FONT_COLOR = "#FFFFFF"
FONT_FAMILIES = ["Arial", "DejaVu Sans", "Noto Sans KR", "Malgun Gothic"]

# date font px = image width * date scale / DATE_FONT_DIVISOR
DATE_FONT_DIVISOR = 3

DEFAULT_TOOL_COLOR = "#FF0000"
DEFAULT_TOOL_THICKNESS = 3
DEFAULT_TOOL_CORNER_RADIUS = 0
DEFAULT_ANNOTATION_FONT_SIZE = 16
DEFAULT_ANNOTATION_FONT = "sans-serif"

DASH_PATTERN = (10, 5)
ARROW_HEAD_LENGTH = 15
ARROW_HEAD_ANGLE_DEG = 30

SELECTION_COLOR = "#3498DB"
SELECTION_PADDING = 4

EXPORT_FORMATS = ("png", "jpg")
EXPORT_SIZES = ["original", "640x400", "500x400"]
DEFAULT_EXPORT_QUALITY = 90
ARCHIVE_NAME = "watermark_images.zip"
LETTERBOX_BACKGROUND = "#FFFFFF"
