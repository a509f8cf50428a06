from pydantic_settings import BaseSettings
from pydantic import Field

AWESOMEAPI_USD_BRL_URL = "https://economia.awesomeapi.com.br/json/last/USD-BRL"

class Settings(BaseSettings):
    quote_api_url: str = Field(default=AWESOMEAPI_USD_BRL_URL, alias="QUOTE_API_URL")
    quote_pair: str = Field(default="USDBRL", alias="QUOTE_PAIR")
    fetch_timeout_ms: int = Field(default=200, gt=0, alias="FETCH_TIMEOUT_MS")
    database_url: str = Field(default="sqlite+aiosqlite:///./dollarQuotation.db", alias="DATABASE_URL")
    db_timeout_ms: int = Field(default=10, gt=0, alias="DB_TIMEOUT_MS")
    db_connect_timeout_ms: int = Field(default=1000, gt=0, alias="DB_CONNECT_TIMEOUT_MS")
    server_host: str = Field(default="0.0.0.0", alias="SERVER_HOST")
    server_port: int = Field(default=8080, alias="SERVER_PORT")
    client_url: str = Field(default="http://localhost:8080/cotacao", alias="CLIENT_URL")
    client_timeout_ms: int = Field(default=300, gt=0, alias="CLIENT_TIMEOUT_MS")
    client_output_path: str = Field(default="cotacao.txt", alias="CLIENT_OUTPUT_PATH")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Timeouts em segundos, no formato esperado por asyncio/httpx
    @property
    def fetch_timeout(self) -> float:
        return self.fetch_timeout_ms / 1000

    @property
    def db_timeout(self) -> float:
        return self.db_timeout_ms / 1000

    @property
    def db_connect_timeout(self) -> float:
        return self.db_connect_timeout_ms / 1000

    @property
    def client_timeout(self) -> float:
        return self.client_timeout_ms / 1000

    class Config:
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True

settings = Settings()
