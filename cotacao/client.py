#!/usr/bin/env python3
"""
Cliente de linha de comando: consulta o servidor e grava a cotação em arquivo.

Uso:
python -m cotacao.client [--url http://localhost:8080/cotacao] [--output cotacao.txt] [--timeout-ms 300]

Qualquer falha é registrada no log e o programa termina sem gravar nada.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path

import httpx
from loguru import logger

from cotacao.core.config import settings
from cotacao.core.logging import configure_logging


class ClientError(Exception):
    """Falha em qualquer etapa do cliente; a mensagem identifica a etapa."""


async def _get(client: httpx.AsyncClient, url: str) -> httpx.Response:
    try:
        request = client.build_request("GET", url)
    except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
        raise ClientError(f"Erro ao criar requisição: {exc}") from exc
    try:
        return await client.send(request)
    except httpx.TimeoutException as exc:
        raise ClientError(f"Prazo excedido ao enviar requisição: {exc}") from exc
    except httpx.TransportError as exc:
        raise ClientError(f"Erro ao enviar requisição: {exc}") from exc
    except httpx.DecodingError as exc:
        raise ClientError(f"Erro ao ler resposta: {exc}") from exc
    except httpx.RequestError as exc:
        raise ClientError(f"Erro ao enviar requisição: {exc}") from exc


def extract_bid(body: bytes) -> float:
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise ClientError(f"Erro ao decodificar JSON: {exc}") from exc
    bid = data.get("bid") if isinstance(data, dict) else None
    if isinstance(bid, bool) or not isinstance(bid, (int, float)):
        raise ClientError("Formato de resposta inválido: cotação ausente ou não numérica")
    return float(bid)


async def fetch_bid(
    url: str,
    timeout: float,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> float:
    """Faz o GET sob o prazo ``timeout`` (segundos) e devolve o ``bid``."""
    async with httpx.AsyncClient(transport=transport) as client:
        try:
            response = await asyncio.wait_for(_get(client, url), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise ClientError(f"Prazo de {timeout * 1000:.0f} ms excedido") from exc

    if response.status_code >= 400:
        raise ClientError(f"Erro na resposta do servidor ({response.status_code}): {response.text}")
    return extract_bid(response.content)


def write_quote(path: str | Path, bid: float) -> Path:
    """Grava ``Dólar:<bid>`` via arquivo temporário + rename, sem deixar arquivo parcial."""
    target = Path(path)
    tmp = target.with_name(target.name + ".tmp")
    try:
        tmp.write_text(f"Dólar:{bid:.2f}", encoding="utf-8")
        os.replace(tmp, target)
    except OSError as exc:
        tmp.unlink(missing_ok=True)
        raise ClientError(f"Erro ao gravar arquivo: {exc}") from exc
    return target


async def run(url: str, output: str | Path, timeout: float, *, transport: httpx.AsyncBaseTransport | None = None) -> int:
    try:
        bid = await fetch_bid(url, timeout, transport=transport)
        write_quote(output, bid)
    except ClientError as exc:
        logger.error(str(exc))
        return 1
    logger.info("Cotação do dólar salva em {}", output)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Consulta a cotação do dólar e grava em arquivo")
    parser.add_argument("--url", default=settings.client_url,
                        help=f"Endpoint do servidor (default: {settings.client_url})")
    parser.add_argument("--output", default=settings.client_output_path,
                        help=f"Arquivo de saída (default: {settings.client_output_path})")
    parser.add_argument("--timeout-ms", type=int, default=None,
                        help=f"Prazo total da requisição em ms (default: {settings.client_timeout_ms})")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)
    timeout = args.timeout_ms / 1000 if args.timeout_ms is not None else settings.client_timeout
    return asyncio.run(run(args.url, args.output, timeout))


if __name__ == "__main__":
    sys.exit(main())
