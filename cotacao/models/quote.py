from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, StrictStr

class ProviderQuote(BaseModel):
    """Objeto aninhado por par na resposta da awesomeapi (todos os campos chegam como string)."""
    bid: StrictStr
    timestamp: StrictStr
    create_date: StrictStr

class Quote(BaseModel):
    model_config = ConfigDict(frozen=True)

    bid: float = Field(ge=0, allow_inf_nan=False)
    source_timestamp: int  # identificador do evento no provedor, usado na detecção de mudança
    observed_at: datetime

class QuoteResponse(BaseModel):
    bid: float
