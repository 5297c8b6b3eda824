from stockbook.domain.booking import DeviceConfig, DeviceEntry
from stockbook.domain.validation import validate_attributes, suggest_colors

CONFIG = DeviceConfig(available_colors=["Midnight", "Starlight", "Blue"], storage_options=[128, "256"])


def _entry(**kw):
    return DeviceEntry(identifier="353286110000001", location="TRAY001", **kw)


def test_no_configuration_skips_validation():
    assert validate_attributes(_entry(color="Purple", storage="999"), None) is None


def test_allowed_values_pass():
    assert validate_attributes(_entry(color="Blue", storage="128"), CONFIG) is None


def test_empty_values_are_not_checked():
    assert validate_attributes(_entry(), CONFIG) is None


def test_bad_color():
    err = validate_attributes(_entry(color="Purple"), CONFIG)
    assert err == "Invalid color. Available colors: Midnight, Starlight, Blue"


def test_bad_storage():
    err = validate_attributes(_entry(storage="64"), CONFIG)
    assert err == "Invalid storage option. Available options: 128, 256GB"


def test_both_errors_are_combined():
    err = validate_attributes(_entry(color="Purple", storage="64"), CONFIG)
    assert err.splitlines() == [
        "Invalid color. Available colors: Midnight, Starlight, Blue",
        "Invalid storage option. Available options: 128, 256GB",
    ]


def test_color_match_is_exact():
    assert validate_attributes(_entry(color="blue"), CONFIG) is not None


def test_empty_allowed_list_accepts_anything():
    cfg = DeviceConfig(available_colors=[], storage_options=["64"])
    assert validate_attributes(_entry(color="Anything"), cfg) is None


def test_suggest_colors():
    assert suggest_colors(CONFIG, "light") == ["Starlight"]
    assert suggest_colors(CONFIG, "") == ["Midnight", "Starlight", "Blue"]
    assert suggest_colors(CONFIG, "I") == ["Midnight", "Starlight"]
    assert suggest_colors(None, "x") == []
