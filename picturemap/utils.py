from pathlib import Path, PurePosixPath

from .constants import PICTURES_FORMAT


def is_hidden(name: str) -> bool:
    return name.startswith('.')

def is_canonical(p: Path) -> bool:
    return p.suffix == PICTURES_FORMAT

def canonical_path(p: Path) -> Path:
    """Sibling of `p` in the canonical format (p itself if already canonical)."""
    if is_canonical(p):
        return p
    return p.with_suffix(PICTURES_FORMAT)

def base_name(name: str) -> str:
    # final path component only, both separator styles
    return PurePosixPath(name.replace("\\", "/")).name
