from typing import Sequence


class ToolError(RuntimeError):
    """An external tool could not be run or produced unusable output."""

    def __init__(self, cmd: Sequence[str], reason: str):
        self.cmd = list(cmd)
        self.reason = reason
        super().__init__(f"{' '.join(self.cmd)}: {reason}")


class ScanError(RuntimeError):
    """The pictures directory itself could not be listed."""
