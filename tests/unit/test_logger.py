"""Tests for the log sinks and workflow tagging."""
from datetime import datetime

import pytest
from loguru import logger

from src.rwaflow.utils.logger import log_file_name, setup_logger, tag_workflow


@pytest.fixture
def log_dir(tmp_path):
    path = setup_logger(tmp_path / "logs", console_level="ERROR")
    yield path
    logger.remove()


def read_log(log_dir) -> str:
    logger.complete()
    return (log_dir / log_file_name(datetime.now().strftime("%Y-%m-%d"))).read_text(
        encoding="utf-8"
    )


def test_log_file_name():
    assert log_file_name("2024-05-01") == "rwa_flow_2024-05-01.log"


def test_setup_creates_directory(log_dir):
    assert log_dir.is_dir()


def test_records_outside_a_workflow_are_dashed(log_dir):
    logger.info("starting up")

    assert "| - | " in read_log(log_dir)


def test_decorated_call_tags_its_records(log_dir):
    @tag_workflow("purchase")
    def buy():
        logger.debug("buying")
        return 3

    assert buy() == 3
    logger.info("done")

    lines = read_log(log_dir).splitlines()
    assert "| purchase | " in next(line for line in lines if "buying" in line)
    assert "| - | " in next(line for line in lines if "done" in line)


def test_tag_preserves_wrapped_name():
    @tag_workflow("create")
    def create_asset():
        pass

    assert create_asset.__name__ == "create_asset"
