# utils.py
"""
Utility functions for the particle swarm application.

This module provides helpers, such as logging setup and configuration
loading, that are used across the application but do not belong to the
simulation or the viewer.
"""
import copy
import json
import logging
import logging.handlers
import os
from typing import Any, Dict

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary with an optional "logging" section holding
#       "level", "format" and "log_file". A null "log_file" disables the
#       file handler.
#   - Side Effects: Replaces the root logger's handlers with a console
#     handler and, when enabled, a rotating file handler.
#
# load_config(path: str) -> Dict[str, Any]:
#   - Outputs: The parsed file merged over DEFAULT_CONFIG section by section.
#     A non-positive run_control.log_throttle_steps is replaced by 1.
#   - Raises: FileNotFoundError, json.JSONDecodeError (logged first).

DEFAULT_CONFIG: Dict[str, Any] = {
    "simulation_parameters": {"seed": 42},
    "run_control": {"max_steps": 0, "log_throttle_steps": 300},
    "visualization": {"fullscreen": False, "show_panel": True},
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(levelname)s - %(message)s",
        "log_file": "logs/swarm.log",
    },
}


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Configures the root logger from a configuration dictionary.

    Logs go to the console and, unless disabled, to a rotating file.
    """
    log_config = config.get('logging', {})
    log_level = log_config.get('level', 'INFO').upper()
    log_format = log_config.get('format', DEFAULT_CONFIG['logging']['format'])
    log_file_path = log_config.get('log_file', DEFAULT_CONFIG['logging']['log_file'])

    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Clear existing handlers to avoid duplicate output on re-configuration
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file_path:
        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        # Rotates at 1MB, keeps 5 backups.
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path, maxBytes=1024*1024, backupCount=5
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logging.info("Logging system initialized.")
    logging.debug(f"Log level set to {log_level}.")
    logging.debug(f"Log file path: {log_file_path or 'disabled'}")


def load_config(path: str) -> Dict[str, Any]:
    """Loads a JSON configuration file on top of the defaults."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            loaded = json.load(f)
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise

    config = copy.deepcopy(DEFAULT_CONFIG)
    for section, values in loaded.items():
        if isinstance(values, dict) and isinstance(config.get(section), dict):
            config[section].update(values)
        else:
            config[section] = values

    run_control = config.get("run_control")
    if isinstance(run_control, dict):
        throttle = run_control.get("log_throttle_steps")
        if not isinstance(throttle, int) or throttle < 1:
            logging.warning(f"log_throttle_steps={throttle!r} must be a positive integer. Using 1.")
            run_control["log_throttle_steps"] = 1
    logging.info("Configuration loaded successfully.")
    return config
