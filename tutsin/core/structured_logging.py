"""Structured logging helpers (no credentials or request bodies)."""

import logging
from typing import Any

from fastapi import Request


def build_log_context(
    *,
    client_id: str | None = None,
    admin_id: str | None = None,
    route: str | None = None,
    method: str | None = None,
) -> dict[str, Any]:
    """Return a log ``extra`` dict with only the identifiers that are set."""
    context: dict[str, Any] = {}
    if client_id:
        context["client_id"] = client_id
    if admin_id:
        context["admin_id"] = admin_id
    if route:
        context["route"] = route
    if method:
        context["method"] = method
    return context


def request_log_context(request: Request, **ids: str | None) -> dict[str, Any]:
    return build_log_context(route=request.url.path, method=request.method, **ids)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
