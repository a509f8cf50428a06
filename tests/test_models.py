"""
Testes para os modelos e a configuração.
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from cotacao.core.config import Settings
from cotacao.models import Quote, QuoteRecord


class TestQuote:
    def test_quote_is_immutable(self):
        quote = Quote(bid=5.43, source_timestamp=1000, observed_at=datetime(2024, 1, 1))
        with pytest.raises(ValidationError):
            quote.bid = 6.0

    @pytest.mark.parametrize("bid", [-0.01, float("inf"), float("nan")])
    def test_quote_rejects_invalid_bid(self, bid):
        with pytest.raises(ValidationError):
            Quote(bid=bid, source_timestamp=1000, observed_at=datetime(2024, 1, 1))


class TestQuoteRecordTable:
    def test_table_columns(self):
        table = QuoteRecord.__table__
        assert table.name == "quotes"
        assert set(table.columns.keys()) == {"id", "bid", "timestamp", "create_date"}
        assert table.columns["id"].primary_key
        assert table.columns["create_date"].server_default is not None
        assert table.dialect_options["sqlite"]["autoincrement"] is True


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("FETCH_TIMEOUT_MS", "DB_TIMEOUT_MS", "CLIENT_TIMEOUT_MS", "SERVER_PORT", "QUOTE_PAIR"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.fetch_timeout == 0.2
        assert settings.db_timeout == 0.01
        assert settings.client_timeout == 0.3
        assert settings.server_port == 8080
        assert settings.quote_pair == "USDBRL"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("FETCH_TIMEOUT_MS", "500")
        monkeypatch.setenv("DB_TIMEOUT_MS", "25")
        settings = Settings(_env_file=None)
        assert settings.fetch_timeout == 0.5
        assert settings.db_timeout == 0.025

    def test_timeouts_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, FETCH_TIMEOUT_MS=0)
