"""Display formatting for the shop's single locale (pt-BR)."""


def format_currency(amount: float, symbol: str = "R$") -> str:
    """Format as Brazilian currency, e.g. 1234.5 -> 'R$ 1.234,50', -21 -> '-R$ 21,00'."""
    sign = "-" if amount < 0 else ""
    # Build with US separators, then swap them
    text = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}{symbol} {text}"


def format_weight(kg: float) -> str:
    """Kilograms with up to two decimals and a comma separator, e.g. '12,5 kg'."""
    text = f"{kg:.2f}".rstrip("0").rstrip(".")
    return f"{text.replace('.', ',')} kg"
