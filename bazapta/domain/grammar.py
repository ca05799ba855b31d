"""
Text and URL grammar of the repository.

Two directions are kept symmetric here:

* reprepro's line-oriented output (`list`, `dumpreferences`) is parsed into
  PackageEntry objects and pool file keys;
* PackageEntry objects are rendered into canonical resource paths, and those
  paths are parsed back into the same five identifying fields.

Two URL shapes exist. The flat legacy shape
`/distributions/{dist}/{component}/{arch}/{name}_{version}` is still
accepted for lookups; the hierarchical shape
`/dists/{dist}/{component}/{name}_{version}_{arch}[.deb]` is the one
generated for every emitted link.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List, Optional, Tuple
from urllib.parse import urlsplit

from bazapta.domain.deb_utils import deb_filename, quote_component, quote_segment, unquote_path
from bazapta.domain.errors import MalformedListLine
from bazapta.domain.models import PackageEntry

# ---------------------------------------------------------------------------
# Listing lines
# ---------------------------------------------------------------------------

# squeeze|main|i386: hadoop-0.20-jobtracker 0.20.2+923.97-1
LIST_LINE_PREFIX = re.compile(r"^(?P<distribution>[^|\s]*)\|(?P<component>[^|\s]*)\|(?P<architecture>[^|:\s]*): (?P<rest>.*)$")


def parse_list_line(line: str) -> Optional[PackageEntry]:
    """
    Parse one line of `reprepro list` output.

    Returns None for lines that do not have the `dist|component|arch: `
    prefix at all (blank lines, banners, warnings). Raises MalformedListLine
    when the prefix is there but the line is otherwise broken.
    """
    line = line.rstrip("\r\n")
    m = LIST_LINE_PREFIX.match(line)
    if m is None:
        return None

    fields = m.group("distribution", "component", "architecture")
    tokens = m.group("rest").split(" ")
    if not all(fields) or len(tokens) != 2 or not all(tokens):
        raise MalformedListLine(line)

    distribution, component, architecture = fields
    if not all(component.split("/")):
        raise MalformedListLine(line)
    name, version = tokens
    return PackageEntry(
        distribution=distribution,
        component=component,
        architecture=architecture,
        name=name,
        version=version,
    )


def parse_listing(output: str) -> List[PackageEntry]:
    """
    Parse a full listing. Fails as a whole on the first malformed line.
    """
    entries: List[PackageEntry] = []
    for line in output.splitlines():
        entry = parse_list_line(line)
        if entry is not None:
            entries.append(entry)
    return entries


# ---------------------------------------------------------------------------
# Resource paths
# ---------------------------------------------------------------------------

_SEGMENT = r"[^/]+"
_TOKEN = r"[^/_]+"
# components may span segments, e.g. "updates/main"
_COMPONENT = r"[^/]+(?:/[^/]+)*"

BINARY_PATH = re.compile(
    rf"^/dists/(?P<distribution>{_SEGMENT})/(?P<component>{_COMPONENT})/"
    rf"(?P<name>{_TOKEN})_(?P<version>{_TOKEN})_(?P<architecture>{_TOKEN})\.deb$"
)
INFO_PATH = re.compile(
    rf"^/dists/(?P<distribution>{_SEGMENT})/(?P<component>{_COMPONENT})/"
    rf"(?P<name>{_TOKEN})_(?P<version>{_TOKEN})_(?P<architecture>{_TOKEN})$"
)
FLAT_INFO_PATH = re.compile(
    rf"^/distributions/(?P<distribution>{_SEGMENT})/(?P<component>{_COMPONENT})/"
    rf"(?P<architecture>{_SEGMENT})/(?P<name>{_TOKEN})_(?P<version>{_TOKEN})$"
)
COLLECTION_PATH = re.compile(rf"^/(?:dists|distributions)/(?P<distribution>{_SEGMENT})/?$")
TERM_PATH = re.compile(r"^/terms/(?P<term>[A-Za-z0-9_-]+)$")

ENTRY_FIELDS = ("distribution", "component", "architecture", "name", "version")


def entry_path(entry: PackageEntry) -> str:
    """Hierarchical info path of an entry."""
    return "/dists/{}/{}/{}_{}_{}".format(
        quote_segment(entry.distribution),
        quote_component(entry.component),
        quote_segment(entry.name),
        quote_segment(entry.version),
        quote_segment(entry.architecture),
    )


def flat_entry_path(entry: PackageEntry) -> str:
    """Legacy flat info path of an entry."""
    return "/distributions/{}/{}/{}/{}_{}".format(
        quote_segment(entry.distribution),
        quote_component(entry.component),
        quote_segment(entry.architecture),
        quote_segment(entry.name),
        quote_segment(entry.version),
    )


def canonical_url(entry: PackageEntry, base_url: str) -> str:
    return base_url.rstrip("/") + entry_path(entry)


def download_url(entry: PackageEntry, base_url: str) -> str:
    return canonical_url(entry, base_url) + ".deb"


def distribution_url(distribution: str, base_url: str) -> str:
    return f"{base_url.rstrip('/')}/dists/{quote_segment(distribution)}"


def parse_entry_path(path: str) -> Optional[PackageEntry]:
    """
    Parse a decoded resource path of either shape, binary or info, back into
    an entry. Returns None if the path does not name a single package.
    """
    for pattern in (BINARY_PATH, INFO_PATH, FLAT_INFO_PATH):
        m = pattern.match(path)
        if m:
            return PackageEntry(**{field: m.group(field) for field in ENTRY_FIELDS})
    return None


def parse_entry_url(url: str) -> Optional[PackageEntry]:
    return parse_entry_path(unquote_path(urlsplit(url).path))


# ---------------------------------------------------------------------------
# dumpreferences
# ---------------------------------------------------------------------------


def parse_reference_line(line: str) -> Optional[Tuple[str, str]]:
    """
    Split a `reprepro dumpreferences` line into (identifier, filekey).

    squeeze|main|i386 pool/main/h/hadoop/hadoop_0.20.2_i386.deb
    """
    parts = line.split()
    if len(parts) != 2:
        return None
    return parts[0], parts[1]


def iter_references(output: str, distribution: str) -> Iterator[str]:
    prefix = f"{distribution}|"
    for line in output.splitlines():
        ref = parse_reference_line(line)
        if ref and ref[0].startswith(prefix):
            yield ref[1]


def find_package_file(references: Iterable[str], name: str, version: str, architecture: str) -> Optional[str]:
    """
    Pick the pool file key for a package out of referenced file keys.

    The architecture-specific file wins; an `_all.deb` file is the fallback.
    """
    keys = list(references)
    candidates = [deb_filename(name, version, architecture)]
    if architecture != "all":
        candidates.append(deb_filename(name, version, "all"))

    for filename in candidates:
        for key in keys:
            if key.rsplit("/", 1)[-1] == filename:
                return key
    return None
