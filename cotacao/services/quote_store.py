"""Armazenamento append-only das cotações observadas.

Premissa de concorrência: não há lock na aplicação; leitores e escritores
concorrentes são serializados pelo lock de arquivo do próprio SQLite. Duas
requisições simultâneas podem ler o mesmo "último registro" e ambas inserir,
gerando no pior caso uma linha duplicada, nunca corrupção.
"""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlmodel import select

from cotacao.core.config import settings
from cotacao.core.errors import (
    StoreBootstrapError,
    StoreConnectError,
    StoreDriverError,
    StoreTimeoutError,
)
from cotacao.db.session import build_session_factory, create_all
from cotacao.models import Quote, QuoteRecord


class QuoteStoreSession:
    """Conexão de uma requisição; cada operação tem seu próprio prazo.

    O prazo é imposto dentro do driver: ao expirar, a instrução em curso é
    interrompida (``sqlite3_interrupt``) e só então o resultado real é
    avaliado. Um ``StoreTimeoutError`` é levantado apenas quando nada foi
    gravado; um COMMIT que já terminou quando o prazo expirou é devolvido
    como sucesso, porque a linha existe.
    """

    def __init__(self, session: AsyncSession, timeout: float):
        self._session = session
        self.timeout = timeout
        self._expired = False

    async def _driver_connection(self):
        conn = await self._session.connection()
        raw = await conn.get_raw_connection()
        return raw.driver_connection

    async def _run(self, operation: str, coro_factory, *, keep_late_result: bool = False):
        driver = await self._driver_connection()
        self._expired = False
        task = asyncio.ensure_future(coro_factory())
        try:
            done, _ = await asyncio.wait({task}, timeout=self.timeout)
        except asyncio.CancelledError:
            self._expired = True
            await driver.interrupt()
            task.cancel()
            raise

        if not done:
            self._expired = True
            await driver.interrupt()
            message = f"{operation}: prazo de {self.timeout * 1000:.0f} ms excedido"
            # espera o desfecho real da instrução interrompida
            try:
                result = await asyncio.shield(task)
            except (SQLAlchemyError, StoreTimeoutError) as exc:
                raise StoreTimeoutError(message) from exc
            if not keep_late_result:
                raise StoreTimeoutError(message)
            logger.warning("{} concluído após o prazo de {:.0f} ms; resultado mantido", operation, self.timeout * 1000)
            return result

        try:
            return task.result()
        except SQLAlchemyError as exc:
            raise StoreDriverError(f"{operation}: {exc}") from exc

    async def _select_latest(self) -> Optional[QuoteRecord]:
        stmt = select(QuoteRecord).order_by(QuoteRecord.id.desc()).limit(1)
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def _insert(self, quote: Quote) -> QuoteRecord:
        record = QuoteRecord(
            bid=Decimal(str(quote.bid)),
            timestamp=quote.source_timestamp,
            create_date=quote.observed_at,
        )
        self._session.add(record)
        await self._session.flush()
        if self._expired:
            # prazo expirou entre o INSERT e o COMMIT: não grava
            raise StoreTimeoutError("append: prazo excedido antes do commit")
        await self._session.commit()
        return record

    async def most_recent(self) -> Optional[QuoteRecord]:
        """Registro de maior id, ou ``None`` se a tabela estiver vazia."""
        return await self._run("most_recent", self._select_latest)

    async def append(self, quote: Quote) -> QuoteRecord:
        return await self._run("append", lambda: self._insert(quote), keep_late_result=True)


class QuoteStore:
    def __init__(
        self,
        engine: AsyncEngine,
        *,
        timeout: float | None = None,
        connect_timeout: float | None = None,
    ):
        self.engine = engine
        self.timeout = timeout if timeout is not None else settings.db_timeout
        self.connect_timeout = connect_timeout if connect_timeout is not None else settings.db_connect_timeout
        self._session_factory = build_session_factory(engine)
        self._bootstrapped = False
        self._bootstrap_lock = asyncio.Lock()

    @property
    def bootstrapped(self) -> bool:
        return self._bootstrapped

    async def bootstrap(self) -> None:
        """CREATE TABLE IF NOT EXISTS, executado uma vez por processo."""
        if self._bootstrapped:
            return
        async with self._bootstrap_lock:
            if self._bootstrapped:
                return
            try:
                await create_all(self.engine)
            except (SQLAlchemyError, OSError) as exc:
                raise StoreBootstrapError(f"erro ao criar tabela quotes: {exc}") from exc
            self._bootstrapped = True

    @asynccontextmanager
    async def session(self) -> AsyncIterator[QuoteStoreSession]:
        """Abre a conexão da requisição e garante o fechamento em qualquer saída."""
        await self.bootstrap()
        async with self._session_factory() as session:
            try:
                await asyncio.wait_for(session.connection(), timeout=self.connect_timeout)
            except asyncio.TimeoutError as exc:
                raise StoreConnectError("prazo de conexão com o banco excedido") from exc
            except (SQLAlchemyError, OSError) as exc:
                raise StoreConnectError(f"erro ao conectar ao banco: {exc}") from exc
            yield QuoteStoreSession(session, self.timeout)
