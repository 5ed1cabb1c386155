"""
Version information for tokendrop.
"""
import importlib.metadata
import pathlib

import tomli

DEFAULT_VERSION = "0.1.0"


def _read_version() -> str:
    try:
        return importlib.metadata.version("tokendrop")
    except importlib.metadata.PackageNotFoundError:
        pass

    # Source checkout: read pyproject.toml next to the package
    path = pathlib.Path(__file__).parent.parent / "pyproject.toml"
    try:
        with path.open("rb") as f:
            data = tomli.load(f)
        return data["project"]["version"]
    except (FileNotFoundError, KeyError, tomli.TOMLDecodeError):
        return DEFAULT_VERSION


__version__ = _read_version()
