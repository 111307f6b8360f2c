"""Tests for configuration loading."""

from datetime import date
from pathlib import Path

from crater.config import CraterConfig, load_config
from crater.config.settings import STORE_PATH_ENV
from crater.sources import HttpReleaseIndex, JsonResultStore, StaticReleaseIndex


class TestCraterConfig:
    """Tests for CraterConfig."""

    def test_defaults(self):
        config = CraterConfig()

        assert config.store.path == Path("./data")
        assert config.releases.source == "static"
        assert config.report.format == "markdown"
        assert config.validate().is_ok()

    def test_from_dict(self):
        result = CraterConfig.from_dict({
            "store": {"path": "/srv/crater", "credentials": {"token": "abc"}},
            "releases": {"source": "http", "lookback_days": 10},
            "timeouts": {"store_query": 5},
            "report": {"inspector_url": "https://i.example/{crate}"},
        })

        config = result.unwrap()
        assert config.store.path == Path("/srv/crater")
        assert config.store.credentials == {"token": "abc"}
        assert config.releases.lookback_days == 10
        assert config.timeouts.store_query == 5.0
        assert config.report.inspector_url == "https://i.example/{crate}"

    def test_from_dict_rejects_wrong_shapes(self):
        result = CraterConfig.from_dict({"timeouts": {"store_query": "soon"}})

        assert result.is_err()
        assert result.unwrap_err().field == "unknown"

    def test_validate_rejects_non_positive_timeout(self):
        config = CraterConfig.from_dict({"timeouts": {"graph_query": 0}}).unwrap()

        error = config.validate().unwrap_err()
        assert error.field == "timeouts.graph_query"

    def test_validate_rejects_unknown_release_source(self):
        config = CraterConfig.from_dict({"releases": {"source": "ftp"}}).unwrap()

        assert config.validate().unwrap_err().field == "releases.source"

    def test_from_yaml_missing_file(self, tmp_path):
        result = CraterConfig.from_yaml(tmp_path / "missing.yaml")

        assert result.unwrap_err().field == "path"

    def test_from_yaml_invalid(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("store: [unclosed")

        assert CraterConfig.from_yaml(path).unwrap_err().field == "yaml"

    def test_static_release_dates_from_yaml(self, config_dir):
        config = CraterConfig.from_yaml(config_dir / "defaults.yaml").unwrap()

        assert config.releases.static["stable"] == [date(2016, 1, 21)]

    def test_factories(self, tmp_path):
        config = CraterConfig.from_dict({"store": {"path": str(tmp_path)}}).unwrap()

        assert isinstance(config.create_store(), JsonResultStore)
        assert config.create_graph().root == tmp_path
        assert isinstance(config.create_release_index(), StaticReleaseIndex)

        config.releases.source = "http"
        assert isinstance(config.create_release_index(), HttpReleaseIndex)

    def test_graph_path_override(self, tmp_path):
        config = CraterConfig.from_dict({
            "store": {"path": str(tmp_path), "graph_path": str(tmp_path / "graphs-db")},
        }).unwrap()

        assert config.create_graph().root == tmp_path / "graphs-db"


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_directory_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv(STORE_PATH_ENV, raising=False)

        config = load_config(tmp_path / "absent").unwrap()

        assert config == CraterConfig()

    def test_loads_defaults_yaml(self, config_dir, data_root, monkeypatch):
        monkeypatch.delenv(STORE_PATH_ENV, raising=False)

        config = load_config(config_dir).unwrap()

        assert config.store.path == data_root
        assert config.logging.level == "error"

    def test_environment_overrides_store_path(self, config_dir, tmp_path, monkeypatch):
        monkeypatch.setenv(STORE_PATH_ENV, str(tmp_path / "elsewhere"))

        config = load_config(config_dir).unwrap()

        assert config.store.path == tmp_path / "elsewhere"

    def test_invalid_values_fail(self, tmp_path):
        (tmp_path / "defaults.yaml").write_text("timeouts:\n  store_query: -1\n")

        assert load_config(tmp_path).is_err()
