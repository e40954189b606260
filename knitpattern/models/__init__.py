from .palette import Center, Pattern, QuantizeResult

__all__ = [
    "Center",
    "Pattern",
    "QuantizeResult",
]
