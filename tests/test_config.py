"""Tests for configuration schemas and loading."""

import json
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from sysmetrics.core.config import load_config, save_config
from sysmetrics.core.schemas import CYCLE_ORDER, ExporterConfig, Resource


class TestExporterConfig:
    """Tests for the ExporterConfig schema."""

    def test_defaults(self) -> None:
        """Test the documented defaults."""
        config = ExporterConfig()
        assert config.listen_address == "0.0.0.0"
        assert config.port == 8000
        assert config.interval_seconds == 1.0
        assert config.proc_root == Path("/proc")
        assert config.disk_device is None
        assert config.network_interface is None
        assert config.collectors == list(CYCLE_ORDER)
        assert config.log_level == "INFO"

    @pytest.mark.parametrize("port", [0, 70000])
    def test_port_range(self, port: int) -> None:
        """Test ports outside 1-65535 are rejected."""
        with pytest.raises(ValidationError):
            ExporterConfig(port=port)

    def test_interval_floor(self) -> None:
        """Test sub-100ms intervals are rejected."""
        with pytest.raises(ValidationError):
            ExporterConfig(interval_seconds=0.01)

    def test_collectors_normalized(self) -> None:
        """Test duplicates are dropped and cycle order restored."""
        config = ExporterConfig(collectors=["context", "cpu", "context"])
        assert config.collectors == [Resource.CPU, Resource.CONTEXT]
        assert config.is_enabled(Resource.CPU)
        assert not config.is_enabled(Resource.DISK)

    def test_unknown_collector(self) -> None:
        """Test an unknown resource name is rejected."""
        with pytest.raises(ValidationError):
            ExporterConfig(collectors=["gpu"])

    def test_blank_device_means_auto(self) -> None:
        """Test empty device names fall back to detection."""
        config = ExporterConfig(disk_device="  ", network_interface=" eth1 ")
        assert config.disk_device is None
        assert config.network_interface == "eth1"

    def test_log_level(self) -> None:
        """Test log levels are upper-cased and validated."""
        assert ExporterConfig(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            ExporterConfig(log_level="chatty")


class TestConfigFiles:
    """Tests for load_config / save_config."""

    def test_load_yaml(self, tmp_path: Path) -> None:
        """Test loading a YAML file."""
        path = tmp_path / "exporter.yaml"
        path.write_text(
            yaml.safe_dump({"port": 9100, "collectors": ["memory", "cpu"], "disk_device": "sdb"})
        )
        config = load_config(path)
        assert config.port == 9100
        assert config.collectors == [Resource.CPU, Resource.MEMORY]
        assert config.disk_device == "sdb"

    def test_load_json(self, tmp_path: Path) -> None:
        """Test loading a JSON file."""
        path = tmp_path / "exporter.json"
        path.write_text(json.dumps({"interval_seconds": 5, "proc_root": "/host/proc"}))
        config = load_config(path)
        assert config.interval_seconds == 5.0
        assert config.proc_root == Path("/host/proc")

    def test_empty_yaml_gives_defaults(self, tmp_path: Path) -> None:
        """Test an empty document yields the defaults."""
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert load_config(path) == ExporterConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_unsupported_suffix(self, tmp_path: Path) -> None:
        """Test unknown formats are rejected."""
        path = tmp_path / "exporter.toml"
        path.write_text("port = 1")
        with pytest.raises(ValueError, match="Unsupported"):
            load_config(path)

    def test_invalid_values(self, tmp_path: Path) -> None:
        """Test schema violations surface as ValidationError."""
        path = tmp_path / "bad.yaml"
        path.write_text("port: -1\n")
        with pytest.raises(ValidationError):
            load_config(path)

    @pytest.mark.parametrize("name", ["out/exporter.yaml", "out/exporter.json"])
    def test_save_and_reload(self, tmp_path: Path, name: str) -> None:
        """Test a saved config loads back unchanged."""
        config = ExporterConfig(port=9200, collectors=["network"], network_interface="wlan0")
        path = tmp_path / name
        save_config(config, path)
        assert load_config(path) == config

    def test_save_unsupported_suffix(self, tmp_path: Path) -> None:
        """Test saving to an unknown format fails."""
        with pytest.raises(ValueError):
            save_config(ExporterConfig(), tmp_path / "exporter.ini")
