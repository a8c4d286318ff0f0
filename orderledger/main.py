# orderledger/main.py

from __future__ import annotations

import logging

from fastapi import FastAPI

from orderledger.config import setup_json_logging, settings
from orderledger.api.errors import install_error_handlers
from orderledger.api.routes.ledger import router as ledger_router
from orderledger.api.routes.orders import router as orders_router


def create_app() -> FastAPI:
    setup_json_logging(log_level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO))

    app = FastAPI(
        title="ORDER LEDGER - Sheets API",
        version="0.1.0",
    )

    install_error_handlers(app)
    app.include_router(ledger_router)
    app.include_router(orders_router)

    @app.get("/health")
    def health():
        return {"ok": True}

    return app


app = create_app()
