"""Version management for VidBatch."""

from importlib import metadata
from pathlib import Path

try:
    import tomllib
except ImportError:
    # Python < 3.11 fallback
    import tomli as tomllib  # type: ignore


def get_version() -> str:
    """Get the installed version, falling back to pyproject.toml in a source checkout."""
    try:
        return metadata.version("vidbatch")
    except metadata.PackageNotFoundError:
        pass

    pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
    try:
        with open(pyproject_path, "rb") as f:
            return tomllib.load(f)["project"]["version"]
    except (OSError, KeyError, tomllib.TOMLDecodeError):
        return "0.0.0"


__version__ = get_version()
