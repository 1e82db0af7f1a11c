from decimal import ROUND_HALF_UP, Decimal


def format_number_ar(value, thousand_sep=".") -> str:
    # formato es-AR sin decimales: 1234567 -> 1.234.567
    d = Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if d < 0 else ""
    whole = str(abs(d))
    parts = []
    while whole:
        parts.append(whole[-3:])
        whole = whole[:-3]
    return sign + thousand_sep.join(reversed(parts))


def format_price(value, currency_symbol="$", empty="A consultar") -> str:
    """250000 -> $250.000; None/0 -> 'A consultar'."""
    if not value:
        return empty
    return f"{currency_symbol}{format_number_ar(value)}"


def format_date_ar(value) -> str:
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")


def format_datetime_ar(value) -> str:
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y %H:%M")
