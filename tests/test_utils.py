"""Tests for logging setup and config loading."""

import json
import logging
import logging.handlers
from contextlib import contextmanager

import pytest

from utils import DEFAULT_CONFIG, load_config, setup_logging


class TestLoadConfig:
    """Reading config.json."""

    def test_sections_merge_over_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "simulation_parameters": {"particle_count": 500},
            "run_control": {"max_steps": 10},
        }))
        config = load_config(str(path))
        assert config["simulation_parameters"] == {"seed": 42, "particle_count": 500}
        assert config["run_control"]["max_steps"] == 10
        assert config["run_control"]["log_throttle_steps"] == DEFAULT_CONFIG["run_control"]["log_throttle_steps"]
        assert config["logging"] == DEFAULT_CONFIG["logging"]

    def test_defaults_are_not_mutated(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"visualization": {"fullscreen": True}}))
        load_config(str(path))
        assert DEFAULT_CONFIG["visualization"]["fullscreen"] is False

    @pytest.mark.parametrize("throttle", [0, -5, None])
    def test_non_positive_log_throttle_becomes_one(self, tmp_path, throttle):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"run_control": {"log_throttle_steps": throttle}}))
        config = load_config(str(path))
        assert config["run_control"]["log_throttle_steps"] == 1

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "absent.json"))

    def test_bad_json_raises(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(json.JSONDecodeError):
            load_config(str(path))

    def test_repository_config_loads(self):
        from pathlib import Path
        from settings import SimulationConfig

        config = load_config(str(Path(__file__).parent.parent / "config.json"))
        sim_config = SimulationConfig.from_params(config["simulation_parameters"])
        assert sim_config.color_theme == "ember"
        assert sim_config.boundary_radius == 10.0


@contextmanager
def _isolated_root_logger():
    """Restores the root logger's handlers and level on exit."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    try:
        yield root
    finally:
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)


class TestSetupLogging:
    """Root logger configuration."""

    def test_console_and_rotating_file(self, tmp_path):
        log_file = tmp_path / "logs" / "swarm.log"
        with _isolated_root_logger() as root:
            setup_logging({"logging": {"level": "debug", "log_file": str(log_file)}})
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 2
            assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers)

            logging.info("hello swarm")
            for handler in root.handlers:
                handler.flush()
        assert "hello swarm" in log_file.read_text()

    def test_file_handler_can_be_disabled(self):
        with _isolated_root_logger() as root:
            setup_logging({"logging": {"level": "WARNING", "log_file": None}})
            assert root.level == logging.WARNING
            assert len(root.handlers) == 1
            assert not isinstance(root.handlers[0], logging.handlers.RotatingFileHandler)
