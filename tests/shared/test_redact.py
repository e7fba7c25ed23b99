from shared.redact import REDACTED, redact_params, redact_url


def test_redact_url_masks_api_keys_only():
    url = "https://api.currencyapi.com/v3/latest?apikey=abc%2C123&base_currency=EUR&currencies=USD%2CJPY"

    redacted = redact_url(url)

    assert "abc" not in redacted
    assert redacted == (
        "https://api.currencyapi.com/v3/latest?apikey=***REDACTED***&base_currency=EUR&currencies=USD%2CJPY"
    )


def test_redact_url_without_query_is_untouched():
    assert redact_url("https://api.currencyapi.com/v3/latest") == "https://api.currencyapi.com/v3/latest"


def test_redact_params_is_case_insensitive_and_keeps_order():
    pairs = [("base_currency", "EUR"), ("ApiKey", "x"), ("access_token", "y"), ("value", "10")]

    assert redact_params(pairs) == [
        ("base_currency", "EUR"),
        ("ApiKey", REDACTED),
        ("access_token", REDACTED),
        ("value", "10"),
    ]
