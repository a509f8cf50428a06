"""Taxonomia de erros do pipeline de cotação.

Cada falha carrega apenas o contexto necessário (etapa, campo) e sobe direto
até a borda da requisição; não há retry nem valor de fallback.
"""
from __future__ import annotations


class FetchError(Exception):
    """Falha ao obter ou interpretar a cotação do provedor externo."""


class FetchTransportError(FetchError):
    """Conexão recusada, falha de DNS, URL inválida ou outro erro de transporte."""


class FetchTimeoutError(FetchError):
    """O prazo da chamada ao provedor expirou."""


class FetchStatusError(FetchError):
    def __init__(self, status_code: int, message: str | None = None):
        self.status_code = status_code
        super().__init__(message or f"provedor respondeu com status HTTP {status_code}")


class FetchDecodeError(FetchError):
    """Corpo da resposta não é JSON válido."""


class FetchFieldError(FetchError):
    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"campo '{field}' ausente ou com tipo inválido")


class BidParseError(FetchError):
    pass


class TimestampParseError(FetchError):
    pass


class CreateDateParseError(FetchError):
    pass


class StoreError(Exception):
    """Falha no armazenamento local de cotações."""


class StoreBootstrapError(StoreError):
    """Não foi possível garantir a existência da tabela."""


class StoreConnectError(StoreError):
    """Não foi possível obter uma conexão com o banco."""


class StoreTimeoutError(StoreError):
    """O prazo da operação no banco expirou."""


class StoreDriverError(StoreError):
    """Erro reportado pelo driver/SQLAlchemy."""


class SerializationError(Exception):
    """Falha ao serializar a resposta para JSON."""


class ServiceError(Exception):
    """Falha terminal de uma requisição, com a etapa que falhou."""

    def __init__(self, stage: str, cause: Exception):
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage}: {cause}")
