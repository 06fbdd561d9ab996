import subprocess
from pathlib import Path

from .constants import DEFAULT_TOOL_TIMEOUT_S
from .errors import ToolError


def convert_image(src: Path, dst: Path, convert_bin="convert", timeout_s=DEFAULT_TOOL_TIMEOUT_S):
    cmd = [convert_bin, str(src), str(dst)]
    try:
        subprocess.run(cmd, check=True, capture_output=True, timeout=timeout_s)
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or b"").decode(errors="replace").strip()
        raise ToolError(cmd, f"exit status {e.returncode}: {stderr}") from e
    except subprocess.TimeoutExpired as e:
        raise ToolError(cmd, f"timed out after {timeout_s}s") from e
    except OSError as e:
        raise ToolError(cmd, f"could not start: {e}") from e
