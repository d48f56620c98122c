"""Output writers for batch results."""

import json
from pathlib import Path
from typing import List
import structlog

from unfurler.models import UnfurlResult

logger = structlog.get_logger()


def to_record(url: str, result: UnfurlResult) -> dict:
    """Flatten a (url, result) pair into one output record."""
    return {"url": url, **result.to_dict()}


class Writer:
    """Handles writing unfurl results to different formats."""

    @staticmethod
    def write_json(results: List[tuple[str, UnfurlResult]], output_path: Path):
        """
        Write results to a JSON array file.

        Args:
            results: (url, result) pairs
            output_path: Output file path
        """
        data = [to_record(url, result) for url, result in results]

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        logger.info("wrote_json", path=str(output_path), records=len(results))

    @staticmethod
    def write_jsonl(results: List[tuple[str, UnfurlResult]], output_path: Path):
        """
        Write results to JSONL (newline-delimited JSON) file.

        Args:
            results: (url, result) pairs
            output_path: Output file path
        """
        with open(output_path, "w", encoding="utf-8") as f:
            for url, result in results:
                json_line = json.dumps(to_record(url, result), ensure_ascii=False)
                f.write(json_line + "\n")

        logger.info("wrote_jsonl", path=str(output_path), records=len(results))
