from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, Response
from cotacao.core.errors import ServiceError
from cotacao.services.quotation_service import QuotationService

router = APIRouter(tags=["cotacao"])

_FAILURE_MESSAGES = {
    "fetch": "Failed to fetch quotation",
    "database connect": "Failed to connect to database",
    "table bootstrap": "Failed to create quotes table",
    "persistence": "Failed to save quotation",
    "serialization": "Failed to serialize quotation to JSON",
}

@router.get("/cotacao")
async def cotacao(request: Request):
    """
    Retorna a cotação atual do dólar (USD-BRL) e registra a cotação no banco quando ela muda.

    **Exemplo de resposta:**
    ```json
    {"bid": 5.43}
    ```

    Em caso de falha responde 500 com texto simples indicando a etapa (busca, conexão,
    criação da tabela, persistência ou serialização).
    """
    service: QuotationService = request.app.state.quotation_service
    try:
        body = await service.render()
    except ServiceError as exc:
        prefix = _FAILURE_MESSAGES.get(exc.stage, "Failed to handle quotation")
        return PlainTextResponse(f"{prefix}: {exc.cause}", status_code=500)
    return Response(content=body, media_type="application/json")
