"""Unit tests for option validation, YAML loading and argument parsing."""

from __future__ import annotations

import pytest

from mkseq.core.config import (
    AltitudeConfig,
    CenteringConfig,
    SmoothingConfig,
    SpeedConfig,
    TimestampConfig,
    TransformationConfig,
    create_default_config,
    parse_bearing,
    parse_nodes,
    parse_number,
    parse_speed,
)
from mkseq.errors import ConfigurationError


def test_defaults_are_valid():
    config = TransformationConfig()
    assert config.validate()
    assert config.normalize_bearing
    assert not config.smooth.enabled
    assert not config.altitude.keep


@pytest.mark.parametrize(
    "kwargs",
    [
        {"smooth": SmoothingConfig(enabled=True), "interpolate_linear": True},
        {"center": CenteringConfig(enabled=True), "smooth": SmoothingConfig(enabled=True)},
        {"center": CenteringConfig(enabled=True), "interpolate_linear": True},
    ],
)
def test_position_transforms_are_exclusive(kwargs):
    with pytest.raises(ConfigurationError, match="mutually exclusive"):
        TransformationConfig(**kwargs)


@pytest.mark.parametrize(
    "kwargs, flag",
    [
        ({"smooth": SmoothingConfig(harmonic=True)}, "smooth.harmonic"),
        ({"smooth": SmoothingConfig(altitude=True)}, "smooth.altitude"),
        ({"timestamp": TimestampConfig(overwrite=True)}, "timestamp.overwrite"),
    ],
)
def test_sub_options_need_their_parent(kwargs, flag):
    with pytest.raises(ConfigurationError) as excinfo:
        TransformationConfig(**kwargs)
    assert excinfo.value.flag == flag


def test_invalid_enumerations():
    with pytest.raises(ConfigurationError):
        TransformationConfig(center=CenteringConfig(enabled=True, degrees_ref="X"))
    with pytest.raises(ConfigurationError):
        TransformationConfig(speed=SpeedConfig(enabled=True, unit="Q"))
    with pytest.raises(ConfigurationError):
        TransformationConfig(log_level="CHATTY")
    with pytest.raises(ConfigurationError):
        TransformationConfig(smooth=SmoothingConfig(enabled=True, nodes=2.5))


def test_mutation_is_checked_on_validate():
    config = TransformationConfig(smooth=SmoothingConfig(enabled=True, nodes=3))
    config.interpolate_linear = True
    with pytest.raises(ConfigurationError):
        config.validate()


def test_from_dict_nested_sections():
    config = TransformationConfig.from_dict({
        "smooth": {"enabled": True, "nodes": 4, "harmonic": True},
        "altitude": {"keep": True, "value": -3.5},
        "area_information": "Harbour walk",
    })
    assert config.smooth.nodes == 4
    assert config.smooth.harmonic
    assert config.altitude == AltitudeConfig(keep=True, value=-3.5)
    assert config.area_information == "Harbour walk"


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ConfigurationError):
        TransformationConfig.from_dict({"smooth": {"window": 3}})
    with pytest.raises(ConfigurationError):
        TransformationConfig.from_dict({"sharpen": True})


def test_yaml_round_trip(tmp_path):
    path = tmp_path / "config.yaml"
    created = create_default_config(str(path))
    loaded = TransformationConfig.from_yaml(str(path))
    assert loaded == created
    assert loaded.smooth.enabled and loaded.smooth.nodes == 5


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert TransformationConfig.from_yaml(str(path)) == TransformationConfig()


def test_yaml_must_be_a_mapping(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- smooth\n- center\n")
    with pytest.raises(ConfigurationError):
        TransformationConfig.from_yaml(str(path))


def test_str_lists_enabled_options():
    text = str(TransformationConfig(smooth=SmoothingConfig(enabled=True, nodes=3)))
    assert "smooth" in text and "normalize_bearing" in text and "nodes: 3" in text


# --- Argument parsing -------------------------------------------------
@pytest.mark.parametrize(
    "text, expected",
    [("45", (45.0, "T")), ("45T", (45.0, "T")), ("10.5m", (10.5, "M")), (" -90 ", (-90.0, "T"))],
)
def test_parse_bearing(text, expected):
    assert parse_bearing(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [("30", (30.0, "K")), ("12N", (12.0, "N")), ("55.5M", (55.5, "M"))],
)
def test_parse_speed(text, expected):
    assert parse_speed(text) == expected


def test_invalid_suffix_names_flag_and_value():
    with pytest.raises(ConfigurationError) as excinfo:
        parse_bearing("45X")
    assert excinfo.value.flag == "--center"
    assert excinfo.value.value == "45X"


@pytest.mark.parametrize("text", ["abc", "4.5", ""])
def test_parse_nodes_rejects_non_integers(text):
    with pytest.raises(ConfigurationError):
        parse_nodes(text)


def test_parse_nodes_and_number():
    assert parse_nodes(" 7 ") == 7
    assert parse_number("-12.5", "--altitude") == -12.5
    with pytest.raises(ConfigurationError) as excinfo:
        parse_number("high", "--altitude")
    assert excinfo.value.flag == "--altitude"


@pytest.mark.parametrize(
    "data, flag",
    [
        ({"center": {"enabled": True, "degrees": "90T"}}, "center.degrees"),
        ({"altitude": {"keep": True, "value": "high"}}, "altitude.value"),
        ({"speed": {"enabled": True, "value": "fast"}}, "speed.value"),
        ({"speed": {"enabled": True, "value": True}}, "speed.value"),
        ({"altitude": {"keep": True, "value": float("nan")}}, "altitude.value"),
    ],
)
def test_numeric_settings_must_be_numbers(data, flag):
    with pytest.raises(ConfigurationError) as excinfo:
        TransformationConfig.from_dict(data)
    assert excinfo.value.flag == flag


def test_numeric_settings_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("center:\n  enabled: true\n  degrees: 90T\n")
    with pytest.raises(ConfigurationError) as excinfo:
        TransformationConfig.from_yaml(str(path))
    assert excinfo.value.value == "90T"


def test_integer_settings_are_accepted():
    config = TransformationConfig.from_dict({"altitude": {"keep": True, "value": 12}})
    assert config.altitude.value == 12


@pytest.mark.parametrize("text", ["nan", "inf", "-inf", "Infinity"])
def test_parse_number_rejects_non_finite(text):
    with pytest.raises(ConfigurationError) as excinfo:
        parse_number(text, "--altitude")
    assert (excinfo.value.flag, excinfo.value.value) == ("--altitude", text)


def test_parse_bearing_rejects_infinity():
    with pytest.raises(ConfigurationError):
        parse_bearing("infT")
