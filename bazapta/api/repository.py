"""
HTTP surface of the repository.

A single catch-all route receives every request, whatever its method. The path is classified by
the ResourceRouter and the request is dispatched to the handler of the
matched resource kind. Each resource kind advertises the methods it accepts
in the `Allow` header of every response, errors included.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Dict

from fastapi import Request, Response, status
from fastapi.responses import RedirectResponse

from bazapta.api.responses import (
    distributions_response,
    entries_response,
    entry_response,
    error_response,
    package_file_response,
    term_response,
)
from bazapta.core.config import Settings
from bazapta.core.dependencies import get_package_service, get_resource_router, get_settings
from bazapta.domain.deb_utils import deb_filename
from bazapta.domain.errors import (
    BazaptaError,
    MethodNotAllowed,
    ResourceNotFound,
    ToolFailure,
)
from bazapta.domain.models import (
    BinaryMatch,
    CollectionMatch,
    InfoMatch,
    PathMatch,
    RootMatch,
    TermMatch,
)
from bazapta.domain.routing import ResourceRouter, classify
from bazapta.services.packages import PackageService
from bazapta.storage.staging import UPLOAD_FIELD, discard, stage_upload

logger = logging.getLogger(__name__)
ALLOWED_METHODS: Dict[str, str] = {
    "binary": "GET,DELETE",
    "info": "GET",
    # DELETE by name only is still served but deprecated, so not advertised
    "collection": "GET,POST",
    "root": "GET",
    "term": "GET",
}


class RequestContext:
    """Everything a resource handler needs besides the matched path."""

    def __init__(self, request: Request, request_id: int, packages: PackageService,
                 routing: ResourceRouter, settings: Settings):
        self.request = request
        self.request_id = request_id
        self.packages = packages
        self.routing = routing
        self.settings = settings

    @property
    def tag(self) -> str:
        return f"REQ[{self.request_id:04d}]"

    @property
    def method(self) -> str:
        return self.request.method.upper()

    @property
    def base_url(self) -> str:
        return str(self.request.base_url)


Handler = Callable[[PathMatch, RequestContext], Awaitable[Response]]


# ---------------------------------------------------------------------------
# Package binaries: /dists/{dist}/{component}/{name}_{version}_{arch}.deb
# ---------------------------------------------------------------------------


async def handle_binary(match: BinaryMatch, ctx: RequestContext) -> Response:
    if ctx.method == "GET":
        logger.debug(f"{ctx.tag} resolving package file for {match.name} {match.version} {match.architecture}")
        path = await ctx.packages.resolve_package_file(
            match.distribution, match.name, match.version, match.architecture
        )
        if path is None or not path.is_file():
            raise ResourceNotFound(
                f"no package file {deb_filename(match.name, match.version, match.architecture)} "
                f"in '{match.distribution}'"
            )
        return package_file_response(path)

    if ctx.method == "DELETE":
        logger.debug(f"{ctx.tag} removing {match.name} ({match.architecture}) from '{match.distribution}'")
        await ctx.packages.remove_package(match.distribution, match.name, match.architecture)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    raise MethodNotAllowed(ctx.method)


# ---------------------------------------------------------------------------
# Package info: /dists/{dist}/{component}/{name}_{version}_{arch}
# ---------------------------------------------------------------------------


async def handle_info(match: InfoMatch, ctx: RequestContext) -> Response:
    if ctx.method != "GET":
        raise MethodNotAllowed(ctx.method)

    entry = await ctx.packages.package_info(
        match.distribution, match.component, match.architecture, match.name, match.version
    )
    if entry is None:
        raise ResourceNotFound(
            f"package {match.name} {match.version} ({match.architecture}) not found in '{match.distribution}'"
        )
    return entry_response(entry, ctx.base_url)


# ---------------------------------------------------------------------------
# Distribution collection: /dists/{dist} and /distributions/{dist}
# ---------------------------------------------------------------------------


async def handle_collection(match: CollectionMatch, ctx: RequestContext) -> Response:
    if ctx.method == "GET":
        logger.debug(f"{ctx.tag} list packages for '{match.distribution}'")
        entries = await ctx.packages.list_packages(match.distribution)
        return entries_response(entries, ctx.base_url)

    if ctx.method == "POST":
        logger.debug(f"{ctx.tag} receiving a new package for '{match.distribution}'")
        form = await ctx.request.form()
        staged = await stage_upload(form.get(UPLOAD_FIELD), ctx.settings.staging_dir)
        try:
            await ctx.packages.register_package(match.distribution, staged)
        finally:
            discard(staged)
        return Response(status_code=status.HTTP_201_CREATED)

    if ctx.method == "DELETE":
        name = ctx.request.query_params.get("package")
        if not name:
            raise BazaptaError("missing query parameter 'package'", status_code=400)
        logger.warning(
            f"{ctx.tag} deprecated name-only removal of {name} from '{match.distribution}', "
            f"use DELETE on the package binary URL instead"
        )
        await ctx.packages.remove_package(match.distribution, name)
        return Response(status_code=status.HTTP_204_NO_CONTENT, headers={"Deprecation": "true"})

    raise MethodNotAllowed(ctx.method)


# ---------------------------------------------------------------------------
# API root and vocabulary documents
# ---------------------------------------------------------------------------


async def handle_root(match: RootMatch, ctx: RequestContext) -> Response:
    if ctx.method != "GET":
        raise MethodNotAllowed(ctx.method)
    return distributions_response(ctx.routing.distributions, ctx.base_url)


async def handle_term(match: TermMatch, ctx: RequestContext) -> Response:
    if ctx.method != "GET":
        raise MethodNotAllowed(ctx.method)

    path = ctx.settings.terms_dir / f"{match.term}.json"
    if not path.is_file():
        raise ResourceNotFound(f"unknown term: '{match.term}'")
    return term_response(path)


HANDLERS: Dict[str, Handler] = {
    "binary": handle_binary,
    "info": handle_info,
    "collection": handle_collection,
    "root": handle_root,
    "term": handle_term,
}


async def handle_request(request: Request) -> Response:
    routing = get_resource_router(request)
    ctx = RequestContext(request, routing.next_request_id(), get_package_service(request), routing,
                         get_settings(request))
    request_path = "/" + request.path_params.get("path", "")
    logger.debug(f"{ctx.tag} received {ctx.method} {request_path}")

    match = classify(request_path)
    handler = HANDLERS.get(match.kind)
    if handler is None:
        logger.debug(f"{ctx.tag} unspecified location: {request_path}")
        return RedirectResponse(url="/", status_code=status.HTTP_301_MOVED_PERMANENTLY)

    allow = ALLOWED_METHODS[match.kind]
    try:
        routing.ensure_supported(match)
        response = await handler(match, ctx)
    except ToolFailure as e:
        logger.error(f"{ctx.tag} {e.message}")
        response = error_response(e.message, e.status_code)
    except BazaptaError as e:
        log = logger.error if e.status_code >= 500 else logger.info
        log(f"{ctx.tag} {e.status_code} {e.message}")
        response = error_response(e.message, e.status_code)

    response.headers["Allow"] = allow
    return response


class RepositoryEndpoint:
    """
    ASGI endpoint mounted on `/{path:path}`.

    Starlette only restricts methods for function endpoints, so every method
    reaches handle_request and gets the Allow header of its resource.
    """

    async def __call__(self, scope, receive, send) -> None:
        response = await handle_request(Request(scope, receive))
        await response(scope, receive, send)
