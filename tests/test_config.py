"""Tests for run configuration loading."""

import pytest
import yaml

from metattt.config import build_match_config, deep_merge, load_match_config, load_yaml_file
from metattt.errors import ConfigurationError
from metattt.models import PlayerType, WinPolicy


@pytest.fixture
def config_file(tmp_path):
    def _write(content):
        path = tmp_path / "run.yaml"
        path.write_text(content)
        return path

    return _write


class TestDeepMerge:
    def test_nested_keys_merge(self):
        base = {"rules": {"depth": 2, "win_policy": "settled"}, "num_matches": 3}
        merged = deep_merge(base, {"rules": {"depth": 1}})
        assert merged == {"rules": {"depth": 1, "win_policy": "settled"}, "num_matches": 3}
        assert base["rules"]["depth"] == 2

    def test_scalar_replaces_mapping(self):
        assert deep_merge({"rules": {"depth": 2}}, {"rules": None}) == {"rules": None}


class TestLoadYamlFile:
    def test_reads_mapping(self, config_file):
        path = config_file(yaml.safe_dump({"num_matches": 5}))
        assert load_yaml_file(path) == {"num_matches": 5}

    def test_empty_file(self, config_file):
        assert load_yaml_file(config_file("")) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as excinfo:
            load_yaml_file(tmp_path / "absent.yaml")
        assert excinfo.value.context["path"].endswith("absent.yaml")

    def test_directory_instead_of_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as excinfo:
            load_yaml_file(tmp_path)
        assert excinfo.value.context["path"] == str(tmp_path)

    def test_invalid_yaml(self, config_file):
        with pytest.raises(ConfigurationError):
            load_yaml_file(config_file("rules: [depth: 1"))

    def test_top_level_list(self, config_file):
        with pytest.raises(ConfigurationError) as excinfo:
            load_yaml_file(config_file("- 1\n- 2\n"))
        assert excinfo.value.context["found"] == "list"


class TestLoadMatchConfig:
    def test_defaults(self):
        config = load_match_config()
        assert config.num_matches == 1
        assert config.rules.depth == 1
        assert config.rules.win_policy is WinPolicy.EAGER
        assert config.player1.player_type is PlayerType.RANDOM

    def test_file_values(self, config_file):
        path = config_file(
            "num_matches: 4\n"
            "rules:\n"
            "  depth: 2\n"
            "  win_policy: settled\n"
            "  send_to_board: true\n"
            "player2:\n"
            "  player_type: mcts\n"
            "  iterations: 250\n"
        )
        config = load_match_config(path)
        assert config.num_matches == 4
        assert config.rules.depth == 2
        assert config.rules.win_policy is WinPolicy.SETTLED
        assert config.rules.send_to_board is True
        assert config.player2.player_type is PlayerType.MCTS
        assert config.player2.iterations == 250

    def test_overrides_win(self, config_file):
        path = config_file("num_matches: 4\nrules:\n  depth: 2\n  win_policy: settled\n")
        config = load_match_config(path, {"rules": {"depth": 0}, "num_matches": 1})
        assert config.rules.depth == 0
        assert config.rules.win_policy is WinPolicy.SETTLED
        assert config.num_matches == 1

    @pytest.mark.parametrize(
        "data",
        [
            {"rules": {"depth": 9}},
            {"rules": {"depth": -1}},
            {"num_matches": 0},
            {"player1": {"player_type": "oracle"}},
            {"player2": {"iterations": 0}},
            {"player2": {"think_time_ms": 0}},
        ],
    )
    def test_invalid_values(self, data):
        with pytest.raises(ConfigurationError) as excinfo:
            build_match_config(data)
        assert excinfo.value.context["errors"]

    def test_misspelled_key(self, config_file):
        path = config_file("rules:\n  depht: 2\n")
        with pytest.raises(ConfigurationError) as excinfo:
            load_match_config(path)
        assert any(e.startswith("rules.depht") for e in excinfo.value.context["errors"])

    def test_error_names_the_field(self):
        with pytest.raises(ConfigurationError) as excinfo:
            load_match_config(overrides={"rules": {"depth": 7}})
        assert any(e.startswith("rules.depth") for e in excinfo.value.context["errors"])
