"""Tests for environment-driven configuration."""

import pytest

from portal_assistant.config import (
    DEFAULT_CREDIT_PACKAGES,
    AppConfig,
    CreditPackage,
    Provider,
    get_api_key,
    parse_credit_packages,
)


def test_defaults_from_empty_environment():
    config = AppConfig.from_env({})

    assert config.provider is Provider.GEMINI
    assert config.model == "gemini-2.5-flash"
    assert config.assistant_credit_cost == 1
    assert config.new_user_starting_credits == 20
    assert config.credit_packages == DEFAULT_CREDIT_PACKAGES
    assert config.stripe_prices == {}


def test_values_are_read_from_environment():
    config = AppConfig.from_env(
        {
            "LLM_PROVIDER": "OpenAI",
            "LLM_MODEL": "gpt-4.1-mini",
            "ASSISTANT_CREDIT_COST": "3",
            "APP_BASE_URL": "https://portal.example/",
            "STRIPE_PRICE_200": "price_200",
            "STRIPE_PRICE_999": "price_unused",
        }
    )

    assert config.provider is Provider.OPENAI
    assert config.model == "gpt-4.1-mini"
    assert config.assistant_credit_cost == 3
    assert config.app_base_url == "https://portal.example"
    assert config.stripe_prices == {"200": "price_200"}


def test_gemini_model_override():
    assert AppConfig.from_env({"GEMINI_MODEL": "gemini-2.0-flash"}).model == "gemini-2.0-flash"


def test_bad_integer_falls_back_to_default():
    assert AppConfig.from_env({"NEW_USER_STARTING_CREDITS": "lots"}).new_user_starting_credits == 20


def test_parse_credit_packages():
    packages = parse_credit_packages("10:100, 30:400:popular, 60:900:orange")

    assert packages == (
        CreditPackage(price=10, credits=100, color="green"),
        CreditPackage(price=30, credits=400, color="blue", popular=True),
        CreditPackage(price=60, credits=900, color="orange"),
    )


@pytest.mark.parametrize("raw", [None, "", "  ", "10", "ten:100", "10:100,x"])
def test_malformed_credit_packages(raw):
    assert parse_credit_packages(raw) is None


def test_get_api_key():
    assert get_api_key(Provider.GEMINI, {"API_KEY": "k"}) == "k"
    assert get_api_key(Provider.GEMINI, {"GEMINI_API_KEY": "g", "API_KEY": "k"}) == "g"
    with pytest.raises(RuntimeError, match="OPENAI_API_KEY missing"):
        get_api_key(Provider.OPENAI, {})
