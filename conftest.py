"""
Configuração global para testes pytest.
"""
import pytest
from cotacao.core.http import close_async_client
from cotacao.db.session import build_engine
from cotacao.services.quote_store import QuoteStore


@pytest.fixture(scope="function", autouse=True)
async def cleanup_resources():
    """Limpa recursos compartilhados entre testes."""
    yield
    # Limpar HTTP client global
    await close_async_client()


@pytest.fixture
async def engine(tmp_path):
    """Engine async apontando para um SQLite temporário por teste."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'quotes.db'}")
    yield engine
    await engine.dispose()


@pytest.fixture
async def store(engine):
    # prazo folgado nos testes; o timeout é exercitado explicitamente
    store = QuoteStore(engine, timeout=2.0, connect_timeout=2.0)
    await store.bootstrap()
    return store
