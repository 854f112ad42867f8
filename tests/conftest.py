import faulthandler
import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from core.config import Config

# =============================================================================
# Global state reset fixture for test isolation
# =============================================================================

@pytest.fixture(autouse=True)
def restore_root_logging():
    """
    Restore the root logger after each test.

    setup_logging() replaces the root handlers; without this a console handler
    bound to a captured stream could leak into later tests.
    """
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level
    urllib3_level = logging.getLogger("urllib3").level

    yield

    for handler in list(root_logger.handlers):
        if handler in saved_handlers:
            continue
        if isinstance(handler, RotatingFileHandler) or type(handler) is logging.StreamHandler:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(saved_level)
    logging.getLogger("urllib3").setLevel(urllib3_level)


@pytest.fixture
def temp_config(tmp_path):
    """
    Provide a fresh Config that never touches ~/.exilian.

    The snapshot cache is pointed into tmp_path as well.
    """
    config_path = tmp_path / f"config_{id(tmp_path)}_{time.time_ns()}.json"
    config = Config(config_file=config_path)

    assert config.league.value == "Necropolis", \
        f"FIXTURE CONTAMINATED! league={config.league}, file={config.config_file}"
    assert config.threshold_minutes == 15, \
        f"FIXTURE CONTAMINATED! threshold={config.threshold_minutes}, file={config.config_file}"

    config.data["cache"]["dir"] = str(tmp_path / "cache")
    return config


def pytest_collection_modifyitems(config, items):
    """Everything under tests/unit/ is a unit test."""
    for item in items:
        path = Path(str(item.fspath)).as_posix()
        if "/tests/unit/" in path:
            item.add_marker(pytest.mark.unit)


def pytest_sessionstart(session):  # pragma: no cover - test harness init
    """Enable faulthandler for the entire test run to aid diagnosing hangs."""
    try:
        faulthandler.enable(file=sys.stderr, all_threads=True)
    except (AttributeError, OSError, ValueError):
        # stderr may be replaced by an object without a file descriptor
        pass
