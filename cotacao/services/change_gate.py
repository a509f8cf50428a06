"""Política de escrita condicional: só persiste quando o timestamp do provedor muda."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union, Optional

from cotacao.core.errors import StoreError
from cotacao.models import Quote, QuoteRecord


class QuoteRepository(Protocol):
    async def most_recent(self) -> Optional[QuoteRecord]: ...

    async def append(self, quote: Quote) -> QuoteRecord: ...


@dataclass(frozen=True)
class Inserted:
    record: QuoteRecord


@dataclass(frozen=True)
class Skipped:
    pass


@dataclass(frozen=True)
class Failed:
    error: StoreError


Outcome = Union[Inserted, Skipped, Failed]


async def maybe_persist(store: QuoteRepository, quote: Quote) -> Outcome:
    # O timestamp é o único marcador de mudança confiável do provedor; o bid não entra na comparação.
    try:
        latest = await store.most_recent()
        if latest is not None and latest.timestamp == quote.source_timestamp:
            return Skipped()
        record = await store.append(quote)
    except StoreError as exc:
        return Failed(exc)
    return Inserted(record)
