"""Installed version of utilkit.

Resolved from the ``utilkit`` distribution metadata. In a source checkout
that has not been pip-installed, ``pyproject.toml`` next to the package is
read instead so ``utilkit.__version__`` still matches the release being
worked on.
"""

from importlib.metadata import PackageNotFoundError, version


def _version_from_pyproject() -> str:
    import tomllib
    from pathlib import Path

    pyproject_path = Path(__file__).resolve().parent.parent / "pyproject.toml"
    try:
        with open(pyproject_path, "rb") as f:
            return tomllib.load(f)["project"]["version"]
    except (OSError, KeyError, tomllib.TOMLDecodeError):
        return "0.0.0-dev"


try:
    __version__ = version("utilkit")
except PackageNotFoundError:
    __version__ = _version_from_pyproject()
