from __future__ import annotations

from fastapi import Request

from bazapta.core.config import Settings
from bazapta.domain.routing import ResourceRouter
from bazapta.services.packages import PackageService

# Application state is created once by the startup handler in bazapta.main
# and only read afterwards.


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_resource_router(request: Request) -> ResourceRouter:
    return request.app.state.resource_router


def get_package_service(request: Request) -> PackageService:
    return request.app.state.package_service
