# Every indexed or served picture is normalized to this format
PICTURES_FORMAT = ".png"

# exiftool -c format: signed decimal degrees
EXIFTOOL_COORD_FORMAT = "%+.24f"

DEFAULT_SCAN_INTERVAL_S = 60.0
DEFAULT_TOOL_TIMEOUT_S = 60.0

DEFAULT_CFG_PATH = "config/picturemap.yaml"
