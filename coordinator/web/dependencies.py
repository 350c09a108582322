"""Request-scoped access to the application's service registry."""

from fastapi import Request

from coordinator.services import CoordinatorServices


def get_services(request: Request) -> CoordinatorServices:
    return request.app.state.services
