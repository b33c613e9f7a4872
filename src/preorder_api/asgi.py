from __future__ import annotations

from fastapi import FastAPI

from preorder_api.adapters.inbound.web.fastapi_app import create_app
from preorder_api.bootstrap import UseCases, build_usecases
from preorder_api.config import get_settings
from preorder_api.logging_config import setup_logging


def app_from_usecases(usecases: UseCases) -> FastAPI:
    return create_app(
        usecases.place_order,
        usecases.get_order,
        usecases.payment_actions,
        usecases.order_actions,
        usecases.verification,
        usecases.list_banks,
    )


def create_asgi_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)
    return app_from_usecases(build_usecases(settings))
