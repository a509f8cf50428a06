"""Sobe o servidor HTTP da cotação (``cotacao-server``)."""
import uvicorn

from cotacao.core.config import settings


def main() -> None:
    uvicorn.run("cotacao.main:app", host=settings.server_host, port=settings.server_port)


if __name__ == "__main__":
    main()
