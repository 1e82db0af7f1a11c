import pytest

from hexagono.services.i18n import pick_language, translate


def test_translate_spanish_default():
    assert translate("status.QUOTED") == "Cotizada"


def test_translate_english():
    assert translate("status.QUOTED", "en-US") == "Quoted"


def test_translate_interpolates_params():
    assert translate("errors.invalid_transition", "es", previous="QUOTED", new="PENDING") == (
        "No se puede pasar de QUOTED a PENDING"
    )


def test_missing_params_leave_template():
    assert translate("errors.invalid_status", "en", other="x") == "Invalid quote status: {status}"


def test_unknown_language_falls_back_to_spanish():
    assert translate("errors.quote_not_found", "fr") == "Cotización no encontrada"


def test_unknown_key_returns_key():
    assert translate("nope.key", "en") == "nope.key"


@pytest.mark.parametrize(
    "header, expected",
    [
        ("en-US,en;q=0.9", "en"),
        ("fr-FR,en;q=0.5,es;q=0.8", "es"),
        ("de-DE", "es"),
        (None, "es"),
        ("", "es"),
    ],
)
def test_accept_language(header, expected):
    assert pick_language(accept_language=header) == expected


def test_explicit_preference_wins():
    assert pick_language(accept_language="es-AR", user_pref="en") == "en"
    assert pick_language(accept_language="en", user_pref="xx") == "en"
