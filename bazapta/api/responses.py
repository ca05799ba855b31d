"""
Response rendering for package entries and distributions.

Entries are serialized as indented JSON and carry a `Link` header pointing
at the vocabulary document describing them. Package files are streamed
without any envelope.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse

from bazapta.domain.grammar import canonical_url, distribution_url, download_url
from bazapta.domain.models import PackageEntry

PACKAGE_TERM = "DebianPackage"
DISTRIBUTIONS_TERM = "DistributionCollection"
DEB_MEDIA_TYPE = "application/x-debian-package"


class IndentedJSONResponse(JSONResponse):
    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, indent=1).encode("utf-8") + b"\n"


def describedby(base_url: str, term: str) -> str:
    return f'<{base_url.rstrip("/")}/terms/{term}>; rel="describedby"'


def entry_to_json(entry: PackageEntry, base_url: str) -> Dict[str, str]:
    data = entry.model_dump()
    data["canonicalUrl"] = canonical_url(entry, base_url)
    data["downloadUrl"] = download_url(entry, base_url)
    return data


def entry_response(entry: PackageEntry, base_url: str) -> JSONResponse:
    return IndentedJSONResponse(
        content=entry_to_json(entry, base_url),
        headers={"Link": describedby(base_url, PACKAGE_TERM)},
    )


def entries_response(entries: Iterable[PackageEntry], base_url: str) -> JSONResponse:
    """
    Entries keyed by canonical URL, in the order the tool listed them.
    """
    content: Dict[str, Dict[str, str]] = {}
    for entry in entries:
        data = entry_to_json(entry, base_url)
        content[data["canonicalUrl"]] = data
    return IndentedJSONResponse(
        content=content,
        headers={"Link": describedby(base_url, PACKAGE_TERM)},
    )


def distributions_response(distributions: List[str], base_url: str) -> JSONResponse:
    return IndentedJSONResponse(
        content={"distributions": [distribution_url(name, base_url) for name in distributions]},
        headers={"Link": describedby(base_url, DISTRIBUTIONS_TERM)},
    )


def package_file_response(path: Path) -> FileResponse:
    return FileResponse(path=str(path), filename=path.name, media_type=DEB_MEDIA_TYPE)


def term_response(path: Path) -> FileResponse:
    return FileResponse(path=str(path), media_type="application/json")


def error_response(message: str, status_code: int, headers: Optional[Dict[str, str]] = None) -> PlainTextResponse:
    return PlainTextResponse(f"{message}\n", status_code=status_code, headers=headers)
