CURRENCY_SYMBOLS = {
    'USD': '$',
    'EUR': '€',
    'GBP': '£',
    'JPY': '¥',
    'INR': '₹',
}


def format_currency(value: float | None, currency: str = 'USD') -> str:
    """Format an amount for messages, e.g. `$1,234.50` or `-$20.00`.

    Unknown currencies fall back to the ISO code as a prefix (`CHF 12.00`).
    """
    amount = float(value or 0)
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    digits = 0 if currency.upper() == 'JPY' else 2
    body = f'{abs(amount):,.{digits}f}'
    sign = '-' if amount < 0 else ''
    if symbol is None:
        return f'{sign}{currency.upper()} {body}'
    return f'{sign}{symbol}{body}'
