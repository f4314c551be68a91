"""Version information for the installed package."""

from importlib import metadata
from pathlib import Path

DISTRIBUTION = "asset-rehomer"


def get_version() -> str:
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        pass
    # Running from a source checkout
    version_file = Path(__file__).resolve().parents[3] / "VERSION"
    if version_file.is_file():
        return version_file.read_text(encoding="utf-8").strip()
    return "unknown"
