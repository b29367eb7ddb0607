import pytest
from pydantic import ValidationError

from globetrotter.config.config_models import (
    AppSettings,
    BaseConfigModel,
    BudgetSettings,
    SearchSettings,
    Settings,
    TripSettings,
)


# Test BaseConfigModel for extra="forbid"
def test_base_config_model_forbids_extra_fields():
    class TestModel(BaseConfigModel):
        field1: str

    with pytest.raises(ValidationError) as exc_info:
        TestModel(field1="value", extra_field="forbidden")
    assert "Extra inputs are not permitted" in str(exc_info.value)


# Test AppSettings
def test_app_settings_valid():
    settings = AppSettings(name="test_app", env="prod", version="1.0.0")
    assert settings.name == "test_app"
    assert settings.env == "prod"
    assert settings.version == "1.0.0"


def test_app_settings_invalid_env():
    with pytest.raises(ValidationError):
        AppSettings(name="test", env="invalid", version="1")


# Test BudgetSettings
def test_budget_settings_defaults():
    settings = BudgetSettings()
    assert settings.warning_ratio == 0.8
    assert settings.low_remaining_ratio == 0.1
    assert settings.expensive_activity_ratio == 0.2
    assert settings.currency == "USD"


@pytest.mark.parametrize("field, value", [("warning_ratio", 0), ("warning_ratio", 1.5), ("currency", "DOLLARS")])
def test_budget_settings_invalid(field, value):
    with pytest.raises(ValidationError):
        BudgetSettings(**{field: value})


# Test TripSettings and SearchSettings
def test_trip_settings_defaults():
    settings = TripSettings()
    assert settings.min_name_length == 3
    assert settings.copy_suffix == " (Copy)"
    assert settings.default_category == "activity"


def test_search_settings_requires_positive_limit():
    with pytest.raises(ValidationError):
        SearchSettings(max_results=0)


# Test Settings
def test_settings_defaults_for_optional_sections():
    settings = Settings(app={"name": "globetrotter", "env": "test", "version": "0.1.0"})
    assert settings.budget == BudgetSettings()
    assert settings.search.max_results == 50
    assert settings.trips == TripSettings()


def test_settings_requires_app_section():
    with pytest.raises(ValidationError):
        Settings()


def test_settings_rejects_inverted_budget_thresholds():
    with pytest.raises(ValidationError, match="low_remaining_ratio must be lower than budget.warning_ratio"):
        Settings(
            app={"name": "globetrotter", "env": "test", "version": "0.1.0"},
            budget={"warning_ratio": 0.5, "low_remaining_ratio": 0.6},
        )
