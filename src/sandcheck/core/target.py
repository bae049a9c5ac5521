"""Target directory validation."""

from pathlib import Path

from sandcheck.core.errors import InvalidTarget


def resolve_target(target: str | Path) -> Path:
    """Resolve a project path to its canonical form.

    Args:
        target: Path to the project directory, relative or absolute

    Returns:
        Absolute path with all symlinks resolved

    Raises:
        InvalidTarget: If target is empty, does not exist, is not a
            directory, or resolves to a path containing ':'
    """
    # Path("") is Path("."), so emptiness must be checked on the raw value
    if not str(target).strip():
        raise InvalidTarget(str(target), "path is empty")

    try:
        canonical = Path(target).expanduser().resolve(strict=True)
    except FileNotFoundError:
        raise InvalidTarget(str(target), "no such directory") from None
    except (OSError, RuntimeError) as e:
        # RuntimeError is raised for symlink loops
        raise InvalidTarget(str(target), str(e)) from e

    if not canonical.is_dir():
        raise InvalidTarget(str(target), "not a directory")

    # The bind mount is given as -v <host>:<container>
    if ":" in str(canonical):
        raise InvalidTarget(str(target), f"path contains ':': {canonical}")

    return canonical
