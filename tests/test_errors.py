import pytest

from boundcache.errors import (BoundCacheError, ConfigError,
                               InvalidCapacityError, validate_capacity)


def test_str_includes_context():
    err = InvalidCapacityError("capacity must be >= 1", capacity=-3)
    assert str(err) == "capacity must be >= 1 capacity=-3"

    err = ConfigError("workers must be a positive integer", field="workers")
    assert str(err) == "workers must be a positive integer field=workers"


def test_hierarchy():
    assert issubclass(InvalidCapacityError, BoundCacheError)
    assert issubclass(InvalidCapacityError, ValueError)
    assert issubclass(ConfigError, BoundCacheError)
    assert not issubclass(ConfigError, ValueError)


def test_validate_capacity_passes_valid_values_through():
    assert validate_capacity(1) == 1
    assert validate_capacity(10_000) == 10_000
    with pytest.raises(InvalidCapacityError):
        validate_capacity(False)
