"""
Driver configuration: command line flags first, then BOUNDCACHE_* environment
variables, then built-in defaults.
"""

import argparse
import logging
import os
from dataclasses import dataclass
from typing import Mapping

from boundcache.errors import ConfigError, validate_capacity

logger = logging.getLogger(__name__)

ENV_PREFIX = "BOUNDCACHE_"

DEFAULT_CAPACITY = 128
DEFAULT_WORKERS = 8
DEFAULT_ITERATIONS = 10_000
DEFAULT_KEY_SPACE = 256


@dataclass
class DriverConfig:
    capacity: int = DEFAULT_CAPACITY
    workers: int = DEFAULT_WORKERS
    iterations: int = DEFAULT_ITERATIONS
    "Rounds performed by each worker thread"
    key_space: int = DEFAULT_KEY_SPACE
    "Number of distinct keys the workers draw from"
    debug: bool = False

    @property
    def expected_total(self) -> int:
        return self.workers * self.iterations

    def validate(self) -> "DriverConfig":
        validate_capacity(self.capacity)
        for name in ("workers", "iterations", "key_space"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}", field=name)
        return self


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name.upper())
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(
            f"{ENV_PREFIX}{name.upper()} is not an integer: {raw!r}", field=name
        ) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Hammer an LRU cache and a shared counter from worker threads."
    )
    parser.add_argument(
        "--capacity", type=int, default=None,
        help=f"Maximum number of cache entries (default {DEFAULT_CAPACITY})",
    )
    parser.add_argument(
        "--workers", type=int, default=None,
        help=f"Number of worker threads (default {DEFAULT_WORKERS})",
    )
    parser.add_argument(
        "--iterations", type=int, default=None,
        help=f"Operations per worker (default {DEFAULT_ITERATIONS})",
    )
    parser.add_argument(
        "--key-space", type=int, default=None,
        help=f"Distinct keys used by the workers (default {DEFAULT_KEY_SPACE})",
    )
    parser.add_argument("--debug", action="store_true", help="Enable verbose logging")
    return parser


def load_config(argv=None, env: Mapping[str, str] | None = None) -> DriverConfig:
    if env is None:
        env = os.environ
    args = build_parser().parse_args(argv)

    def pick(name: str, default: int) -> int:
        value = getattr(args, name)
        if value is not None:
            return value
        return _env_int(env, name, default)

    config = DriverConfig(
        capacity=pick("capacity", DEFAULT_CAPACITY),
        workers=pick("workers", DEFAULT_WORKERS),
        iterations=pick("iterations", DEFAULT_ITERATIONS),
        key_space=pick("key_space", DEFAULT_KEY_SPACE),
        debug=args.debug,
    )
    return config.validate()
