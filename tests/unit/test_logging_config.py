"""
Tests de configure_logging : nom du worker dans les logs JSON.
"""

import asyncio
import json
from collections.abc import Iterator
from pathlib import Path

import pytest
from loguru import logger

from cinecat.logging_config import MAIN_WORKER, configure_logging
from cinecat.services.worker_pool import run_bounded


@pytest.fixture
def log_file(tmp_path: Path) -> Iterator[Path]:
    path = tmp_path / "logs" / "cinecat.log"
    configure_logging(log_level="WARNING", log_file=path)
    yield path
    logger.remove()


def read_records(log_file: Path) -> list[dict]:
    logger.complete()
    return [json.loads(line)["record"] for line in log_file.read_text().splitlines()]


class TestConfigureLogging:
    def test_creates_log_directory(self, log_file: Path) -> None:
        assert log_file.parent.is_dir()

    def test_messages_outside_a_pool_are_tagged_main(self, log_file: Path) -> None:
        logger.info("hello")

        records = read_records(log_file)

        assert records[-1]["message"] == "hello"
        assert records[-1]["extra"]["worker"] == MAIN_WORKER

    def test_pool_workers_are_named(self, log_file: Path) -> None:
        async def handler(item: int) -> None:
            logger.info(f"item {item}")
            await asyncio.sleep(0)

        asyncio.run(run_bounded(range(4), handler, limit=2, name="sync"))

        workers = {
            r["extra"]["worker"] for r in read_records(log_file) if r["message"].startswith("item")
        }
        assert workers == {"sync-1", "sync-2"}

    def test_debug_level_goes_to_the_file(self, log_file: Path) -> None:
        logger.debug("details")

        assert any(r["message"] == "details" for r in read_records(log_file))
