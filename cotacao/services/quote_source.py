"""Busca a cotação USD→BRL no provedor externo sob um prazo fixo."""
from __future__ import annotations

import asyncio
import json
import math
import re
from datetime import datetime
from typing import Any

import httpx
from pydantic import ValidationError

from cotacao.core.config import settings
from cotacao.core.errors import (
    BidParseError,
    CreateDateParseError,
    FetchDecodeError,
    FetchFieldError,
    FetchStatusError,
    FetchTimeoutError,
    FetchTransportError,
    TimestampParseError,
)
from cotacao.core.http import get_async_client
from cotacao.models import ProviderQuote, Quote

CREATE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_DECIMAL_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_INTEGER_RE = re.compile(r"[+-]?\d+")
_CREATE_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}")
# timestamp é gravado em BIGINT
_INT64_MIN, _INT64_MAX = -(2**63), 2**63 - 1


def _parse_bid(raw: str) -> float:
    if not _DECIMAL_RE.fullmatch(raw):
        raise BidParseError(f"bid inválido: {raw!r}")
    bid = float(raw)
    if not math.isfinite(bid) or bid < 0:
        raise BidParseError(f"bid fora do intervalo: {raw!r}")
    return bid


def _parse_timestamp(raw: str) -> int:
    if not _INTEGER_RE.fullmatch(raw):
        raise TimestampParseError(f"timestamp inválido: {raw!r}")
    value = int(raw)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise TimestampParseError(f"timestamp fora do intervalo de 64 bits: {raw!r}")
    return value


def _parse_create_date(raw: str) -> datetime:
    if not _CREATE_DATE_RE.fullmatch(raw):
        raise CreateDateParseError(f"create_date inválido: {raw!r}")
    try:
        return datetime.strptime(raw, CREATE_DATE_FORMAT)
    except ValueError as exc:
        raise CreateDateParseError(f"create_date inválido: {raw!r}") from exc


def parse_quote_payload(payload: Any, pair: str) -> Quote:
    """Converte o JSON decodificado do provedor em um ``Quote``.

    Cada etapa que pode falhar gera sua própria subclasse de ``FetchError``:
    presença/tipo dos campos (``FetchFieldError``), depois o parsing de
    ``bid``, ``timestamp`` e ``create_date``.
    """
    if not isinstance(payload, dict):
        raise FetchFieldError(pair, "resposta do provedor não é um objeto JSON")
    rate = payload.get(pair)
    if not isinstance(rate, dict):
        raise FetchFieldError(pair)

    try:
        fields = ProviderQuote.model_validate(rate)
    except ValidationError as exc:
        loc = exc.errors()[0]["loc"]
        field = str(loc[0]) if loc else pair
        raise FetchFieldError(f"{pair}.{field}") from exc

    return Quote(
        bid=_parse_bid(fields.bid),
        source_timestamp=_parse_timestamp(fields.timestamp),
        observed_at=_parse_create_date(fields.create_date),
    )


class QuoteSource:
    """Uma única requisição GET ao provedor, sem retry.

    O prazo cobre conexão, ida e volta e leitura do corpo; ao expirar, a
    corrotina da requisição é cancelada e o httpx libera o socket.
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        pair: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url or settings.quote_api_url
        self.pair = pair or settings.quote_pair
        self.timeout = timeout if timeout is not None else settings.fetch_timeout
        self._client = client

    async def _get(self) -> httpx.Response:
        client = self._client or await get_async_client()
        return await client.get(self.url)

    async def fetch(self) -> Quote:
        try:
            response = await asyncio.wait_for(self._get(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise FetchTimeoutError(f"prazo de {self.timeout * 1000:.0f} ms excedido") from exc
        except httpx.TimeoutException as exc:
            raise FetchTimeoutError(str(exc) or type(exc).__name__) from exc
        except (httpx.TransportError, httpx.InvalidURL) as exc:
            raise FetchTransportError(str(exc) or type(exc).__name__) from exc
        except httpx.DecodingError as exc:
            raise FetchDecodeError(f"corpo da resposta ilegível: {exc}") from exc
        except httpx.RequestError as exc:
            raise FetchTransportError(str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            raise FetchStatusError(response.status_code)

        try:
            payload = json.loads(response.content)
        except ValueError as exc:
            raise FetchDecodeError(f"JSON inválido: {exc}") from exc

        return parse_quote_payload(payload, self.pair)
