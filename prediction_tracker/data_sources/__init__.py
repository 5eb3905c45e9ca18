from .allora import AlloraInferenceClient
from .coingecko import CoinGeckoPriceClient
from .common import parse_positive_number

__all__ = [
    "AlloraInferenceClient",
    "CoinGeckoPriceClient",
    "parse_positive_number",
]
