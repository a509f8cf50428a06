from __future__ import annotations

from loguru import logger
from pydantic import ValidationError

from cotacao.core.errors import (
    FetchError,
    SerializationError,
    ServiceError,
    StoreBootstrapError,
    StoreConnectError,
)
from cotacao.models import QuoteResponse
from cotacao.services.change_gate import Failed, Inserted, maybe_persist
from cotacao.services.quote_source import QuoteSource
from cotacao.services.quote_store import QuoteStore

STAGE_FETCH = "fetch"
STAGE_CONNECT = "database connect"
STAGE_BOOTSTRAP = "table bootstrap"
STAGE_PERSIST = "persistence"
STAGE_SERIALIZE = "serialization"


class QuotationService:
    """Fetching → Gating → Responding para uma requisição.

    Sem estado entre chamadas além do ``QuoteStore`` compartilhado. Qualquer
    falha vira ``ServiceError`` com a etapa correspondente; a resposta usa
    sempre a cotação buscada, nunca a linha armazenada.
    """

    def __init__(self, source: QuoteSource, store: QuoteStore):
        self.source = source
        self.store = store

    async def handle_request(self) -> QuoteResponse:
        try:
            quote = await self.source.fetch()
        except FetchError as exc:
            logger.warning("Falha ao buscar cotação ({}): {}", type(exc).__name__, exc)
            raise ServiceError(STAGE_FETCH, exc) from exc

        try:
            async with self.store.session() as store:
                outcome = await maybe_persist(store, quote)
        except StoreBootstrapError as exc:
            logger.error("Falha ao criar tabela quotes: {}", exc)
            raise ServiceError(STAGE_BOOTSTRAP, exc) from exc
        except StoreConnectError as exc:
            logger.error("Falha ao conectar ao banco: {}", exc)
            raise ServiceError(STAGE_CONNECT, exc) from exc

        if isinstance(outcome, Failed):
            logger.error("Falha ao salvar cotação ({}): {}", type(outcome.error).__name__, outcome.error)
            raise ServiceError(STAGE_PERSIST, outcome.error) from outcome.error
        if isinstance(outcome, Inserted):
            logger.info("Cotação salva: id={} timestamp={} bid={}", outcome.record.id, quote.source_timestamp, quote.bid)
        else:
            logger.debug("Cotação inalterada (timestamp={}), nada a salvar", quote.source_timestamp)

        try:
            return QuoteResponse(bid=quote.bid)
        except ValidationError as exc:
            raise ServiceError(STAGE_SERIALIZE, SerializationError(str(exc))) from exc

    async def render(self) -> bytes:
        """Executa a requisição e devolve o corpo JSON já serializado."""
        response = await self.handle_request()
        try:
            return response.model_dump_json().encode()
        except (ValueError, TypeError) as exc:
            logger.error("Falha ao serializar cotação: {}", exc)
            raise ServiceError(STAGE_SERIALIZE, SerializationError(str(exc))) from exc
