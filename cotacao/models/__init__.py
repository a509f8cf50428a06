from .quote import ProviderQuote, Quote, QuoteResponse
from .quote_record import QuoteRecord
