from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .version import VCardVersion

logger = logging.getLogger(__name__)

CONF_NAME = "vcard-scribe.toml"

DEFAULT_CONF = """# vcard-scribe local config (TOML)
target_version = "4.0"
add_prodid = true
version_strict = true
line_length = 75
"""


@dataclass
class Settings:
    target_version: str | None = None
    include_trailing_semicolons: bool | None = None
    add_prodid: bool = True
    version_strict: bool = True
    line_length: int | None = 75

    @property
    def version(self) -> VCardVersion | None:
        if self.target_version is None:
            return None
        return VCardVersion.from_label(self.target_version)

    def writer_options(self) -> dict[str, Any]:
        """Keyword arguments for :class:`~vcard_scribe.io.VCardWriter`."""
        return {
            "target_version": self.version,
            "include_trailing_semicolons": self.include_trailing_semicolons,
            "add_prodid": self.add_prodid,
            "version_strict": self.version_strict,
            "line_length": self.line_length,
        }


def default_conf_path(base: Path | None = None) -> Path:
    return Path(base or os.getcwd()) / CONF_NAME


def load_settings(path: Path | None = None) -> Settings:
    """Read settings from a TOML file; missing keys keep their defaults.

    A missing file gives the defaults. A malformed one does too, with a
    warning logged.
    """
    conf = Path(path) if path is not None else default_conf_path()
    settings = Settings()
    if not conf.exists():
        return settings

    try:
        data = tomllib.loads(conf.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        logger.warning("Ignoring malformed config %s: %s", conf, exc)
        return settings

    version = data.get("target_version")
    if version is not None:
        if VCardVersion.from_label(str(version)) is None:
            logger.warning("Unknown target_version %r in %s", version, conf)
        else:
            settings.target_version = str(version)

    if "include_trailing_semicolons" in data:
        settings.include_trailing_semicolons = bool(data["include_trailing_semicolons"])
    settings.add_prodid = bool(data.get("add_prodid", settings.add_prodid))
    settings.version_strict = bool(data.get("version_strict", settings.version_strict))

    line_length = data.get("line_length", settings.line_length)
    settings.line_length = int(line_length) if line_length else None
    return settings


def write_default_conf(path: Path) -> None:
    """Create a config file with the defaults unless one exists."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        path.write_text(DEFAULT_CONF, encoding="utf-8")
