"""Configuration helpers for loading environment variables.

This module ensures that variables defined in a project-level ``.env`` file
are loaded before attempting to access them.  Consumers should rely on the
``get_env`` helper instead of using :func:`os.getenv` directly so that the
configuration is loaded in a single, well-defined place.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEVELOPMENT = "development"
PRODUCTION = "production"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@lru_cache(maxsize=1)
def _load_environment() -> None:
    """Load environment variables from the project's ``.env`` file.

    The loader first attempts to read ``.env`` from the repository root.  If the
    file does not exist we still call :func:`load_dotenv` to allow the default
    discovery mechanism to run (e.g., for users who keep the file in the
    working directory).  Subsequent calls are cached so the file is only read
    once per process.
    """

    project_root = Path(__file__).resolve().parents[1]
    env_path = project_root / ".env"

    if env_path.exists():
        load_dotenv(env_path, override=False)
    else:
        load_dotenv(override=False)


def get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Return the value for ``key`` from the environment.

    Parameters
    ----------
    key:
        The name of the environment variable to look up.
    default:
        The value to return when ``key`` is not present.
    """

    _load_environment()
    return os.environ.get(key, default)


def _parse_flag(key: str, value: Optional[str]) -> Optional[bool]:
    if value is None or value.strip() == "":
        return None
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f"{key} must be a boolean flag, got {value!r}")


def current_mode() -> str:
    """Return the active delivery mode, read fresh from the environment.

    Only ``development`` selects the inline stylesheet; every other value,
    including an unset variable, is treated as a packaged production build.
    """

    value = (get_env("CANVASPRINT_ENV", PRODUCTION) or PRODUCTION).strip().lower()
    return DEVELOPMENT if value == DEVELOPMENT else PRODUCTION


@dataclass(frozen=True)
class ExportSettings:
    """Static export configuration.

    The delivery mode is deliberately absent: it is evaluated on every export
    through :func:`current_mode`.
    """

    locator: str = "SVG"
    sink: str = "download"
    filename: str = "drawing.svg"
    output_dir: Path = Path(".")
    base_url: Optional[str] = None
    declaration: Optional[bool] = None
    single_flight: bool = False
    fetch_timeout: Optional[float] = None

    @classmethod
    def from_env(cls) -> "ExportSettings":
        """Build settings from ``CANVASPRINT_*`` variables."""

        timeout = get_env("CANVASPRINT_FETCH_TIMEOUT")
        return cls(
            locator=get_env("CANVASPRINT_LOCATOR", cls.locator) or cls.locator,
            sink=(get_env("CANVASPRINT_SINK", cls.sink) or cls.sink).strip().lower(),
            filename=get_env("CANVASPRINT_FILENAME", cls.filename) or cls.filename,
            output_dir=Path(get_env("CANVASPRINT_OUTPUT_DIR", ".") or "."),
            base_url=get_env("CANVASPRINT_BASE_URL") or None,
            declaration=_parse_flag("CANVASPRINT_DECLARATION", get_env("CANVASPRINT_DECLARATION")),
            single_flight=bool(
                _parse_flag("CANVASPRINT_SINGLE_FLIGHT", get_env("CANVASPRINT_SINGLE_FLIGHT"))
            ),
            fetch_timeout=float(timeout) if timeout else None,
        )


__all__ = ["DEVELOPMENT", "PRODUCTION", "ExportSettings", "current_mode", "get_env"]
