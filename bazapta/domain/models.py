"""
Pydantic models for the Debian repository API.

This module defines the data models used throughout the application:
- Package entries parsed from the repository tool's listing output
- Distributions discovered from the repository layout
- Results of repository tool invocations
- Typed results of request path classification

All models use Pydantic for validation and serialization.
"""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Package Models
# ---------------------------------------------------------------------------


class PackageEntry(BaseModel):
    """
    One package instance in one distribution.

    Entries are built per request from the repository tool's live output
    and discarded once the response is written. The five fields together
    identify an entry within one listing.
    """

    model_config = ConfigDict(frozen=True)

    distribution: str = Field(min_length=1, description="Distribution codename, e.g. 'squeeze'.")
    component: str = Field(description="Archive component, e.g. 'main'.")
    architecture: str = Field(description="Debian architecture, e.g. 'i386' or 'all'.")
    name: str = Field(description="Binary package name.")
    version: str = Field(description="Debian version string, treated as an opaque token.")


# ---------------------------------------------------------------------------
# Repository Tool Models
# ---------------------------------------------------------------------------


class ToolResult(BaseModel):
    """
    Outcome of a single repository tool invocation.

    `output` holds stdout and stderr combined, whatever the exit status.
    A process that could not be launched is reported with a negative
    status and the launch error as output.
    """

    args: List[str] = Field(default_factory=list)
    output: str = ""
    status: int = 0

    @property
    def ok(self) -> bool:
        return self.status == 0

    def lines(self) -> List[str]:
        return self.output.splitlines()


# ---------------------------------------------------------------------------
# Path Classification Models
# ---------------------------------------------------------------------------


class BinaryMatch(BaseModel):
    """`/dists/{dist}/{component}/{name}_{version}_{arch}.deb`"""

    kind: str = "binary"
    distribution: str
    component: str
    name: str
    version: str
    architecture: str


class InfoMatch(BaseModel):
    """`/dists/{dist}/{component}/{name}_{version}_{arch}` or the flat legacy shape."""

    kind: str = "info"
    distribution: str
    component: str
    name: str
    version: str
    architecture: str


class CollectionMatch(BaseModel):
    kind: str = "collection"
    distribution: str


class RootMatch(BaseModel):
    kind: str = "root"


class TermMatch(BaseModel):
    kind: str = "term"
    term: str


class NoMatch(BaseModel):
    kind: str = "none"
    path: Optional[str] = None


PathMatch = Union[BinaryMatch, InfoMatch, CollectionMatch, RootMatch, TermMatch, NoMatch]
