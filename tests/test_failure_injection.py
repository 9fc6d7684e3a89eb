import pytest

from shared.provider import InvalidArgumentError
from provider_sim.failure_injection import (
    DECLINE_CHANCE_ENV, ERROR_CHANCE_ENV, FailureConfig, PROVIDER_PROFILES,
    get_provider_config,
)


@pytest.mark.unit
class TestFailureConfig:

    def test_defaults(self):
        config = FailureConfig()
        assert config.error_chance == 0
        assert config.decline_chance == 0

    def test_build_accepts_bounds(self):
        config = FailureConfig.build(0, 100)
        assert (config.error_chance, config.decline_chance) == (0, 100)

    @pytest.mark.parametrize("error_chance,decline_chance", [(101, 0), (0, -1), (1000, 1000)])
    def test_build_rejects_out_of_range(self, error_chance, decline_chance):
        with pytest.raises(InvalidArgumentError):
            FailureConfig.build(error_chance, decline_chance)

    def test_parse(self):
        config = FailureConfig.parse("12", " 34\n")
        assert (config.error_chance, config.decline_chance) == (12, 34)

    @pytest.mark.parametrize("error_chance,decline_chance,bad_name", [
        ("", "0", "errorChance"),
        ("1.5", "0", "errorChance"),
        ("0", "lots", "declineChance"),
    ])
    def test_parse_failure_names_parameter(self, error_chance, decline_chance, bad_name):
        with pytest.raises(InvalidArgumentError, match=bad_name):
            FailureConfig.parse(error_chance, decline_chance)


@pytest.mark.unit
class TestGetProviderConfig:

    def test_named_profile(self):
        assert get_provider_config("offline", environ={}) == PROVIDER_PROFILES["offline"]
        assert get_provider_config("declining", environ={}).decline_chance == 100

    def test_unknown_provider_uses_defaults(self):
        assert get_provider_config("providerZ", environ={}) == FailureConfig()

    def test_environment_overrides_profile(self):
        config = get_provider_config("flaky", environ={ERROR_CHANCE_ENV: "75"})
        assert config.error_chance == 75
        assert config.decline_chance == PROVIDER_PROFILES["flaky"].decline_chance

    def test_environment_overrides_both(self):
        environ = {ERROR_CHANCE_ENV: "1", DECLINE_CHANCE_ENV: "2"}
        assert get_provider_config("test", environ=environ) == FailureConfig(error_chance=1, decline_chance=2)

    def test_invalid_environment_value(self):
        with pytest.raises(InvalidArgumentError):
            get_provider_config("test", environ={DECLINE_CHANCE_ENV: "often"})

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv(ERROR_CHANCE_ENV, "33")
        monkeypatch.delenv(DECLINE_CHANCE_ENV, raising=False)
        assert get_provider_config("test").error_chance == 33
