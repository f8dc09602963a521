import pytest

from salesbot.config import DEFAULT_CATALOG, load_settings
from salesbot.errors import ConfigurationError


def test_defaults():
    settings = load_settings({})
    assert settings.backend == "openai"
    assert settings.chat_template == "chatml"
    assert settings.reasoning_open == "<think>"
    assert settings.reasoning_close == "</think>"
    assert settings.no_think_directive == "/no_think"
    assert settings.catalog == DEFAULT_CATALOG
    assert settings.sampling.max_new_tokens == 300
    assert settings.sampling.temperature == 0.15
    assert settings.sampling.top_p == 0.9


def test_environment_overrides():
    settings = load_settings(
        {
            "SALESBOT_BACKEND": "ollama",
            "SALESBOT_MODEL": "qwen3:14b",
            "SALESBOT_CHAT_TEMPLATE": "phi3",
            "SALESBOT_MAX_NEW_TOKENS": "128",
            "SALESBOT_TEMPERATURE": "0.5",
            "SALESBOT_TOP_P": "1",
            "SALESBOT_CATALOG": "Alpha; Beta ;",
            "SALESBOT_NO_THINK_DIRECTIVE": "",
        }
    )
    assert settings.backend == "ollama"
    assert settings.model == "qwen3:14b"
    assert settings.chat_template == "phi3"
    assert settings.sampling.max_new_tokens == 128
    assert settings.sampling.temperature == 0.5
    assert settings.sampling.top_p == 1.0
    assert settings.catalog == ("Alpha", "Beta")
    assert settings.no_think_directive is None


@pytest.mark.parametrize(
    "env",
    [
        {"SALESBOT_TEMPERATURE": "3"},
        {"SALESBOT_TOP_P": "0"},
        {"SALESBOT_MAX_NEW_TOKENS": "zero"},
        {"SALESBOT_BACKEND": "cloud"},
        {"SALESBOT_CHAT_TEMPLATE": "mystery"},
        {"SALESBOT_REASONING_OPEN": ""},
        {"SALESBOT_CATALOG": "Alpha;Alpha"},
    ],
)
def test_invalid_values_raise_configuration_error(env):
    with pytest.raises(ConfigurationError):
        load_settings(env)


def test_configuration_error_is_a_value_error():
    with pytest.raises(ValueError):
        load_settings({"SALESBOT_TEMPERATURE": "-1"})
