"""
Testes para a política de escrita condicional (detecção de mudança pelo timestamp).
"""

from decimal import Decimal

import pytest

from cotacao.core.errors import StoreDriverError, StoreTimeoutError
from cotacao.models import QuoteRecord
from cotacao.services.change_gate import Failed, Inserted, Skipped, maybe_persist

from fakes import make_quote


class InMemoryQuoteRepository:
    """Repositório em memória com a mesma interface de QuoteStoreSession."""

    def __init__(self, read_error=None, write_error=None):
        self.records: list[QuoteRecord] = []
        self.read_error = read_error
        self.write_error = write_error
        self.appends = 0

    async def most_recent(self):
        if self.read_error:
            raise self.read_error
        return self.records[-1] if self.records else None

    async def append(self, quote):
        self.appends += 1
        if self.write_error:
            raise self.write_error
        record = QuoteRecord(
            id=len(self.records) + 1,
            bid=Decimal(str(quote.bid)),
            timestamp=quote.source_timestamp,
            create_date=quote.observed_at,
        )
        self.records.append(record)
        return record


@pytest.mark.asyncio
class TestMaybePersist:
    """Testes para maybe_persist."""

    async def test_inserts_on_empty_store(self):
        repo = InMemoryQuoteRepository()
        outcome = await maybe_persist(repo, make_quote())

        assert isinstance(outcome, Inserted)
        assert outcome.record.id == 1
        assert outcome.record.timestamp == 1000

    async def test_skips_same_timestamp(self):
        repo = InMemoryQuoteRepository()
        await maybe_persist(repo, make_quote())

        outcome = await maybe_persist(repo, make_quote())

        assert isinstance(outcome, Skipped)
        assert len(repo.records) == 1

    async def test_skips_same_timestamp_even_with_different_bid(self):
        # só o timestamp identifica o evento da cotação
        repo = InMemoryQuoteRepository()
        await maybe_persist(repo, make_quote(bid=5.43, ts=1000))

        outcome = await maybe_persist(repo, make_quote(bid=5.99, ts=1000))

        assert isinstance(outcome, Skipped)
        assert len(repo.records) == 1

    async def test_inserts_changed_timestamp_with_same_bid(self):
        repo = InMemoryQuoteRepository()
        await maybe_persist(repo, make_quote(bid=5.43, ts=1000))

        outcome = await maybe_persist(repo, make_quote(bid=5.43, ts=1001))

        assert isinstance(outcome, Inserted)
        assert outcome.record.id == 2

    async def test_compares_only_with_latest_record(self):
        repo = InMemoryQuoteRepository()
        for ts in (1000, 1001):
            await maybe_persist(repo, make_quote(ts=ts))

        # 1000 já existe, mas não é o último registro
        outcome = await maybe_persist(repo, make_quote(ts=1000))

        assert isinstance(outcome, Inserted)
        assert [r.timestamp for r in repo.records] == [1000, 1001, 1000]

    async def test_read_failure(self):
        error = StoreTimeoutError("most_recent: prazo de 10 ms excedido")
        repo = InMemoryQuoteRepository(read_error=error)

        outcome = await maybe_persist(repo, make_quote())

        assert isinstance(outcome, Failed)
        assert outcome.error is error
        assert repo.appends == 0

    async def test_write_failure(self):
        error = StoreDriverError("append: database is locked")
        repo = InMemoryQuoteRepository(write_error=error)

        outcome = await maybe_persist(repo, make_quote())

        assert isinstance(outcome, Failed)
        assert outcome.error is error
        assert repo.records == []

    async def test_run_of_duplicates_appends_once(self):
        repo = InMemoryQuoteRepository()
        outcomes = [await maybe_persist(repo, make_quote(ts=1000)) for _ in range(5)]

        assert sum(isinstance(o, Inserted) for o in outcomes) == 1
        assert len(repo.records) == 1
