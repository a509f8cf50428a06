from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from cotacao.api.routes.cotacao import router as cotacao_router
from cotacao.core.config import Settings, settings as default_settings
from cotacao.core.errors import StoreBootstrapError
from cotacao.core.http import close_async_client
from cotacao.core.logging import configure_logging
from cotacao.db.session import build_engine, check_db
from cotacao.services.quotation_service import QuotationService
from cotacao.services.quote_source import QuoteSource
from cotacao.services.quote_store import QuoteStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    store: QuoteStore = app.state.quote_store
    try:
        await store.bootstrap()
    except StoreBootstrapError as exc:
        # cada requisição tenta de novo e responde 500 com a etapa "table bootstrap"
        logger.error("Tabela quotes não criada na inicialização: {}", exc)
    try:
        yield
    finally:
        await close_async_client()
        await store.engine.dispose()


def create_app(
    settings: Settings | None = None,
    *,
    source: QuoteSource | None = None,
    store: QuoteStore | None = None,
) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level)

    source = source or QuoteSource(
        settings.quote_api_url,
        pair=settings.quote_pair,
        timeout=settings.fetch_timeout,
    )
    store = store or QuoteStore(
        build_engine(settings.database_url),
        timeout=settings.db_timeout,
        connect_timeout=settings.db_connect_timeout,
    )

    app = FastAPI(title="Cotação do Dólar", version="0.1.0", lifespan=lifespan)
    app.state.quote_store = store
    app.state.quotation_service = QuotationService(source, store)
    app.include_router(cotacao_router)

    @app.get("/health")
    async def health():
        db_ok = await check_db(store.engine)
        return {"db": "ok" if db_ok else "down"}

    return app


app = create_app()
