"""Tests for DiagramConfig validation."""

import pytest

from treecanvas import ConfigurationError, DiagramConfig


class TestDefaults:
    def test_defaults_match_documented_values(self):
        config = DiagramConfig()
        assert (config.node_width, config.node_height) == (120, 40)
        assert config.level_height == 80
        assert config.node_spacing == 20
        assert config.max_depth == 100
        assert config.max_children == 1000
        assert config.cache_node_ceiling == 5000
        assert config.visible_node_limit is None


class TestValidation:
    @pytest.mark.parametrize(
        "changes",
        [
            {"node_width": 0},
            {"chunk_size": -1},
            {"node_spacing": -5},
            {"max_depth": "10"},
            {"text_label_limit": 3},
            {"level_height": 10},
            {"min_zoom": 5.0, "max_zoom": 1.0},
            {"fit_fraction": 1.5},
            {"visible_node_limit": -1},
            {"auto_collapse_depth": True},
        ],
    )
    def test_invalid_values_raise(self, changes):
        with pytest.raises(ConfigurationError):
            DiagramConfig(**changes)

    def test_replace_returns_validated_copy(self):
        config = DiagramConfig()
        narrow = config.replace(node_width=60)
        assert narrow.node_width == 60
        assert config.node_width == 120

        with pytest.raises(ConfigurationError):
            config.replace(node_width=0)

    def test_replace_rejects_unknown_fields(self):
        with pytest.raises(ConfigurationError, match="colour"):
            DiagramConfig().replace(colour="red")
