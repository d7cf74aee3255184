'''
Tests for the layered configuration system: defaults, runtime changes,
user configuration files and environment overrides.
'''

import json
import logging

import pytest

from explosive.core.config import (
    CONFIG_FILE_ENV, ConfigManager, get_config, get_config_manager, reset_config, set_config
)
from explosive.core.exceptions import ConfigError


@pytest.fixture
def fresh_manager(tmp_path, monkeypatch):
    """Unconfigured manager whose user file lives in a temporary directory."""
    config_file = tmp_path / "explosive_config.json"
    monkeypatch.setenv(CONFIG_FILE_ENV, str(config_file))
    manager = ConfigManager()
    yield manager, config_file
    logging.getLogger("explosive").setLevel(logging.INFO)


# ---- Defaults and Runtime Changes ----

def test_defaults():
    assert get_config("simulation", "mc_iterations") == 2000
    assert get_config("simulation", "nboot") == 1000
    assert get_config("simulation", "probs") == (0.90, 0.95, 0.99)
    assert get_config("simulation", "parallel") is False
    assert get_config("simulation", "wild_distribution") == "rademacher"
    assert get_config("simulation", "default_cv_seed") == 123
    assert get_config("core", "random_seed") is None
    assert get_config("numerical", "pivot_tolerance") == 1e-12


def test_unknown_option_returns_default():
    assert get_config("simulation", "nonexistent", default=5) == 5
    assert get_config("nonexistent", "nboot") is None


def test_set_and_reset():
    set_config("simulation", "nboot", 250)
    assert get_config("simulation", "nboot") == 250
    assert "simulation.nboot" in get_config_manager().get_modified_options()

    reset_config("simulation", "nboot")
    assert get_config("simulation", "nboot") == 1000

    set_config("simulation", "mc_iterations", 10)
    reset_config("simulation")
    assert get_config("simulation", "mc_iterations") == 2000


def test_string_values_are_coerced():
    set_config("simulation", "nboot", "300")
    set_config("simulation", "parallel", "yes")
    set_config("simulation", "probs", "0.9, 0.95")
    set_config("core", "random_seed", "none")

    assert get_config("simulation", "nboot") == 300
    assert get_config("simulation", "parallel") is True
    assert get_config("simulation", "probs") == (0.9, 0.95)
    assert get_config("core", "random_seed") is None


@pytest.mark.parametrize("section, option, value", [
    ("simulation", "nboot", 0),
    ("simulation", "mc_iterations", -1),
    ("simulation", "probs", (0.99, 0.95)),
    ("simulation", "ncores", 0),
    ("simulation", "wild_distribution", "uniform"),
    ("simulation", "default_cv_seed", -1),
    ("simulation", "default_cv_seed", None),
    ("numerical", "pivot_tolerance", 2.0),
    ("core", "random_seed", -3),
    ("logging", "log_level", "VERBOSE"),
    ("simulation", "nboot", "many"),
])
def test_invalid_values(section, option, value):
    with pytest.raises(ConfigError):
        set_config(section, option, value)


def test_unknown_section_or_option():
    with pytest.raises(ConfigError):
        set_config("plotting", "style", "dark")
    with pytest.raises(ConfigError):
        set_config("simulation", "nrep", 10)
    with pytest.raises(ConfigError):
        reset_config("plotting")


# ---- File and Environment Layers ----

def test_user_file_is_loaded(fresh_manager):
    manager, config_file = fresh_manager
    config_file.write_text(json.dumps({
        "simulation": {"nboot": 123, "probs": [0.9, 0.99]},
        "core": {"random_seed": 17},
    }))
    manager.initialize()

    assert manager.get("simulation", "nboot") == 123
    assert manager.get("simulation", "probs") == (0.9, 0.99)
    assert manager.get("core", "random_seed") == 17


def test_invalid_file_values_keep_defaults(fresh_manager):
    manager, config_file = fresh_manager
    config_file.write_text(json.dumps({
        "simulation": {"nboot": -4, "unknown": 1},
        "plotting": {"style": "dark"},
    }))
    manager.initialize()

    assert manager.get("simulation", "nboot") == 1000


def test_environment_overrides_file(fresh_manager, monkeypatch):
    manager, config_file = fresh_manager
    config_file.write_text(json.dumps({"simulation": {"mc_iterations": 400}}))
    monkeypatch.setenv("EXPLOSIVE_SIMULATION_MC_ITERATIONS", "800")
    monkeypatch.setenv("EXPLOSIVE_SIMULATION_PARALLEL", "true")
    manager.initialize()

    assert manager.get("simulation", "mc_iterations") == 800
    assert manager.get("simulation", "parallel") is True


def test_save_round_trip(fresh_manager):
    manager, config_file = fresh_manager
    manager.initialize()
    manager.set("simulation", "nboot", 77)
    manager.save_user_config()

    saved = json.loads(config_file.read_text())
    assert saved["simulation"]["nboot"] == 77
    assert saved["simulation"]["probs"] == [0.9, 0.95, 0.99]


def test_log_level_applies_to_package_logger(fresh_manager):
    manager, _ = fresh_manager
    manager.initialize()
    manager.set("logging", "log_level", "WARNING")
    assert logging.getLogger("explosive").level == logging.WARNING
