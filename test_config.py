"""Tests for configuration parsing."""

from pathlib import Path

import pytest

from resprite_core.config import (AtlasConfig, output_paths, padding_from_length,
                                  parse_length, parse_ratios)


def test_defaults():
    config = AtlasConfig()
    assert config.padding == 1
    assert config.max_dimension == 4096
    assert config.ratios == (1,)
    assert config.split_ratios is False


def test_ratios_normalized():
    config = AtlasConfig(ratios=(2.0, 1, 2))
    assert config.ratios == (1, 2)
    assert isinstance(config.ratios[1], int)


@pytest.mark.parametrize('kwargs', [
    {'padding': -1},
    {'max_dimension': 0},
    {'ratios': ()},
    {'ratios': (0,)},
    {'threads': -2},
])
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        AtlasConfig(**kwargs)


def test_parse_ratios():
    assert parse_ratios("2,1") == (1, 2)
    assert parse_ratios("1, 1.5, 2x") == (1, 1.5, 2)
    with pytest.raises(ValueError):
        parse_ratios("")
    with pytest.raises(ValueError):
        parse_ratios("one")


def test_parse_length():
    assert parse_length("3") == 3.0
    assert parse_length("3px") == 3.0
    assert parse_length("1in") == 96.0
    assert parse_length("72pt") == pytest.approx(96.0)
    assert parse_length("2px", ratio=2) == 4.0
    assert parse_length("25.4mm") == pytest.approx(96.0)


@pytest.mark.parametrize('text', ["1em", "2ex", "50%", "3furlong", "px"])
def test_parse_length_rejects(text):
    with pytest.raises(ValueError):
        parse_length(text)


def test_padding_rounds_up():
    assert padding_from_length("1") == 1
    assert padding_from_length("0.5mm") == 2
    with pytest.raises(ValueError):
        padding_from_length("-1")


def test_buffer_resolved_per_ratio():
    config = AtlasConfig(buffer="1mm", ratios=(1, 2))
    assert config.padding == 4
    assert config.padding_for(1) == 4
    assert config.padding_for(2) == 8
    assert padding_from_length("0.5mm", 2) == 4


def test_padding_without_buffer_ignores_ratio():
    config = AtlasConfig(padding=3, ratios=(1, 2))
    assert config.padding_for(2) == 3
    with pytest.raises(ValueError):
        AtlasConfig(buffer="-2px")


def test_output_paths():
    assert output_paths(Path("out/sprite")) == (Path("out/sprite.png"), Path("out/sprite.json"))
    assert output_paths(Path("out/sprite.png"), 1) == (Path("out/sprite.png"), Path("out/sprite.json"))
    assert output_paths(Path("sprite.json"), 2) == (Path("sprite@2x.png"), Path("sprite@2x.json"))
    assert output_paths(Path("sprite"), 1.5) == (Path("sprite@1.5x.png"), Path("sprite@1.5x.json"))
