"""
Tests for embedding configuration, presets and YAML loading.
"""

import pytest

from hookemap.config import (
    EmbeddingConfig,
    SimilarityTransform,
    config_from_dict,
    get_preset,
    list_presets,
    load_config,
    parse_transform,
)
from hookemap.errors import ConfigError


class TestDefaults:
    """Tests for the default configuration."""

    def test_defaults(self):
        config = EmbeddingConfig()
        assert config.dimensions == 2
        assert config.number_of_starts == 30
        assert config.initial_iterations == 1500
        assert config.final_iterations == 8000
        assert config.default_mass == 1.0
        assert config.include_reference is True
        assert config.default_force_constant == 500.0
        assert config.transform is SimilarityTransform.INVERSE_3_OFFSET
        assert config.set_missing_to_min is True
        assert config.use_data is True
        assert config.initial_field_size == 16
        assert config.coincident_threshold == 0.0005

    def test_transform_from_string(self):
        config = EmbeddingConfig(transform="inverse")
        assert config.transform is SimilarityTransform.INVERSE

    def test_to_dict(self):
        data = EmbeddingConfig(seed=3).to_dict()
        assert data["transform"] == "inverse_3_offset"
        assert data["seed"] == 3
        assert data["final_iterations"] == 8000

    @pytest.mark.parametrize("kwargs", [
        {"dimensions": 0},
        {"number_of_starts": -1},
        {"final_iterations": -5},
        {"default_mass": 0.0},
        {"strong_force_constant": -1.0},
        {"initial_field_size": 1},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            EmbeddingConfig(**kwargs)


class TestTransforms:
    """Tests for transform lookup."""

    @pytest.mark.parametrize("name", ["one_minus", "ONE_MINUS", " One_Minus "])
    def test_parse_transform(self, name):
        assert parse_transform(name) is SimilarityTransform.ONE_MINUS

    def test_unknown_transform(self):
        with pytest.raises(ConfigError) as exc_info:
            parse_transform("log")
        assert "inverse_2_offset" in str(exc_info.value)


class TestPresets:
    """Tests for named presets."""

    def test_list_presets(self):
        assert list_presets() == ["quick", "standard", "thorough"]

    def test_preset_values(self):
        quick = get_preset("quick")
        assert quick.number_of_starts < get_preset("standard").number_of_starts
        assert get_preset("thorough").final_iterations > 8000

    def test_preset_is_a_copy(self):
        first = get_preset("standard")
        first.number_of_starts = 1
        assert get_preset("standard").number_of_starts == 30

    def test_unknown_preset(self):
        with pytest.raises(ConfigError):
            get_preset("turbo")


class TestLoading:
    """Tests for building configurations from mappings and YAML."""

    def test_from_dict_over_preset(self):
        config = config_from_dict({"preset": "quick", "seed": 9, "transform": "one_minus"})
        assert config.number_of_starts == 5
        assert config.seed == 9
        assert config.transform is SimilarityTransform.ONE_MINUS

    def test_unknown_keys(self):
        with pytest.raises(ConfigError) as exc_info:
            config_from_dict({"starts": 3})
        assert "starts" in str(exc_info.value)

    def test_bad_value_type(self):
        with pytest.raises(ConfigError):
            config_from_dict({"dimensions": "two"})

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text(
            "preset: quick\n"
            "dimensions: 3\n"
            "include_reference: false\n"
            "transform: inverse_offset\n"
        )
        config = load_config(path)

        assert config.dimensions == 3
        assert config.include_reference is False
        assert config.transform is SimilarityTransform.INVERSE_OFFSET
        assert config.final_iterations == 1500

    def test_load_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == get_preset("standard")

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "missing.yaml")

    def test_load_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_load_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("dimensions: [2\n")
        with pytest.raises(ConfigError):
            load_config(path)
