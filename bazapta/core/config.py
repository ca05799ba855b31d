from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "BAZAPTA_"

_PACKAGE_ROOT = Path(__file__).resolve().parents[1]
_DEFAULT_TERMS_DIR = _PACKAGE_ROOT / "terms"

_TRUE_VALUES = ("1", "true", "yes", "on")


class Settings(BaseModel):
    """
    Process-wide configuration, read once at startup.

    Every field can be set through an environment variable named
    BAZAPTA_<FIELD NAME IN UPPER CASE>, e.g. BAZAPTA_REPREPRO_PATH.
    """

    model_config = ConfigDict(frozen=True)

    listen: str = Field(default="0.0.0.0:8080", description="Listen address as host:port.")
    reprepro_path: Path = Field(default=Path("/srv/reprepro/internal/"), description="reprepro base directory.")
    reprepro_bin: str = Field(default="reprepro", description="reprepro executable name or path.")
    sudo: bool = Field(default=True, description="Run reprepro through password-less sudo.")
    verbose: bool = Field(default=False, description="Verbose debugging output.")
    staging_dir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()), description="Scratch directory for uploads.")
    terms_dir: Path = Field(default=_DEFAULT_TERMS_DIR, description="Directory holding the vocabulary documents.")

    @property
    def host_port(self) -> Tuple[str, int]:
        host, _, port = self.listen.rpartition(":")
        # "[::]:8080" binds "::"
        return host.strip("[]") or "0.0.0.0", int(port)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        environ = os.environ if environ is None else environ
        values = {}
        for name, field in cls.model_fields.items():
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is None:
                continue
            if field.annotation in (bool, "bool"):
                values[name] = raw.strip().lower() in _TRUE_VALUES
            else:
                values[name] = raw
        return cls(**values)
