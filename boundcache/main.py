#!/usr/bin/env python3
import logging
import sys
import traceback

import trio

from boundcache.config import DriverConfig, load_config
from boundcache.errors import BoundCacheError
from boundcache.workload import WorkloadReport, run_workload

logger = logging.getLogger(__name__)


def setup_logging(debug_mode):
    level = logging.DEBUG if debug_mode else logging.INFO
    logging.basicConfig(
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s", level=level
    )
    if not debug_mode:
        logging.getLogger("trio").setLevel(logging.WARNING)


def log_report(report: WorkloadReport) -> None:
    stats = report.cache_stats
    logger.info(
        "Counter: %d (expected %d) in %.3fs",
        report.counter_total, report.expected_total, report.elapsed_s,
    )
    logger.info(
        "Cache: size=%d/%d hits=%d misses=%d evictions=%d hit_ratio=%.2f",
        stats.size, stats.capacity, stats.hits, stats.misses, stats.evictions,
        stats.hit_ratio,
    )


async def async_main(config: DriverConfig) -> int:
    try:
        report = await run_workload(config)
    except ExceptionGroup as eg:
        logger.error("Worker failures: %s", eg)
        for i, exc in enumerate(eg.exceptions, 1):
            logger.error("[%d] type=%s -> %s\n%s", i, type(exc).__name__, exc, traceback.format_exc())
        return 1
    log_report(report)
    return 0 if report.consistent else 1


def cli_entry_point(argv=None):
    try:
        config = load_config(argv)
    except BoundCacheError as e:
        logging.critical(f"Invalid configuration: {e}")
        sys.exit(1)
    setup_logging(config.debug)
    try:
        code = trio.run(async_main, config)
    except KeyboardInterrupt:
        code = 130
    except Exception as e:
        logging.critical(f"Fatal error: {e}")
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    cli_entry_point()
