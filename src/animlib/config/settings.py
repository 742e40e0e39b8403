"""
Animation Tool Configuration Settings

All configuration constants for pose export and clip combination.
Modify these values to change exporter behavior.
"""

import json
import logging
import math
from pathlib import Path

logger = logging.getLogger(__name__)

# ============================================================================
# Project Paths
# ============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
ASSETS_DIR = PROJECT_ROOT / "assets"
CONFIG_DIR = ASSETS_DIR / "config"
EXPORT_DIR = PROJECT_ROOT / "exports"

# Model file extensions stripped when deriving an export name
MODEL_EXTENSIONS = (".glb", ".gltf")

# ============================================================================
# Angle Quantization
# ============================================================================

ZERO_ROTATION_EPSILON = 1e-4   # |radian| below this counts as "no rotation"
ANGLE_MATCH_TOLERANCE = 1e-3   # Absolute tolerance when snapping to a fraction of pi
DECIMAL_PLACES = 4             # Fixed-point digits for values that match no fraction
ZERO_TOKEN = "0"

# Reference magnitudes, tested in this order (first match wins).
# Labels are written verbatim into the exported script.
ANGLE_FRACTIONS = (
    ("Math.PI", math.pi),
    ("Math.PI/2", math.pi / 2),
    ("Math.PI/3", math.pi / 3),
    ("Math.PI/4", math.pi / 4),
    ("Math.PI/6", math.pi / 6),
    ("Math.PI/8", math.pi / 8),
    ("Math.PI/9", math.pi / 9),
    ("Math.PI/10", math.pi / 10),
    ("Math.PI/12", math.pi / 12),
    ("Math.PI/18", math.pi / 18),
    ("Math.PI/36", math.pi / 36),
    ("Math.PI/72", math.pi / 72),
)

# ============================================================================
# Pose Export
# ============================================================================

EXPORT_INDENT = "    "          # One indentation level in the generated script
EXPORT_FILE_EXTENSION = ".js"
EXPORT_AXES = ("x", "y", "z")   # Euler axes, in emission order
EXPORT_PROPERTY = "rotation"

# ============================================================================
# Clip Combination
# ============================================================================

COMBINED_CLIP_NAME = "combined"
MIN_CLIPS_TO_COMBINE = 2

# ============================================================================
# Playback
# ============================================================================

DEFAULT_PREVIEW_TIME = 0.1      # Seconds a clip is advanced before a pose is exported
DEFAULT_PLAYBACK_SPEED = 1.0
DEFAULT_LOOP = True

# ============================================================================
# Overrides - Loaded from JSON Config
# ============================================================================

def _load_export_settings() -> dict:
    """
    Load export setting overrides from JSON configuration file.

    Returns:
        Dictionary of overrides (empty when no config file is present)
    """
    config_path = CONFIG_DIR / "export_settings.json"

    if not config_path.exists():
        return {}

    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Error loading export settings from %s: %s", config_path, e)
        return {}

    overrides = {}
    if "export_dir" in config:
        overrides["export_dir"] = Path(config["export_dir"])
    if "preview_time" in config:
        overrides["preview_time"] = float(config["preview_time"])
    if "playback_speed" in config:
        overrides["playback_speed"] = float(config["playback_speed"])

    return overrides


EXPORT_SETTINGS = _load_export_settings()

EXPORT_DIR = EXPORT_SETTINGS.get("export_dir", EXPORT_DIR)
DEFAULT_PREVIEW_TIME = EXPORT_SETTINGS.get("preview_time", DEFAULT_PREVIEW_TIME)
DEFAULT_PLAYBACK_SPEED = EXPORT_SETTINGS.get("playback_speed", DEFAULT_PLAYBACK_SPEED)
