import pytest

from boundcache.config import (DEFAULT_CAPACITY, DEFAULT_ITERATIONS,
                               DEFAULT_KEY_SPACE, DEFAULT_WORKERS,
                               DriverConfig, load_config)
from boundcache.errors import ConfigError, InvalidCapacityError


def test_defaults_when_nothing_given():
    config = load_config([], env={})
    assert config == DriverConfig(
        capacity=DEFAULT_CAPACITY,
        workers=DEFAULT_WORKERS,
        iterations=DEFAULT_ITERATIONS,
        key_space=DEFAULT_KEY_SPACE,
        debug=False,
    )
    assert config.expected_total == DEFAULT_WORKERS * DEFAULT_ITERATIONS


def test_flags_override_environment():
    env = {"BOUNDCACHE_CAPACITY": "7", "BOUNDCACHE_WORKERS": "3"}
    config = load_config(["--capacity", "2", "--debug"], env=env)
    assert config.capacity == 2
    assert config.workers == 3
    assert config.debug is True


def test_environment_fallback():
    env = {
        "BOUNDCACHE_ITERATIONS": "50",
        "BOUNDCACHE_KEY_SPACE": " ",
    }
    config = load_config(["--key-space", "9"], env=env)
    assert config.iterations == 50
    assert config.key_space == 9


def test_blank_env_value_uses_default():
    config = load_config([], env={"BOUNDCACHE_KEY_SPACE": ""})
    assert config.key_space == DEFAULT_KEY_SPACE


def test_malformed_environment_value():
    with pytest.raises(ConfigError) as excinfo:
        load_config([], env={"BOUNDCACHE_WORKERS": "many"})
    assert excinfo.value.field == "workers"
    assert "BOUNDCACHE_WORKERS" in str(excinfo.value)


def test_non_positive_capacity_rejected():
    with pytest.raises(InvalidCapacityError):
        load_config(["--capacity", "0"], env={})


@pytest.mark.parametrize("flag", ["--workers", "--iterations", "--key-space"])
def test_non_positive_counts_rejected(flag):
    with pytest.raises(ConfigError):
        load_config([flag, "-1"], env={})


def test_non_integer_flag_exits():
    with pytest.raises(SystemExit):
        load_config(["--capacity", "lots"], env={})
