"""
Searchlight - Interactive search from the terminal.

Reads one query per line from stdin and prints the ranked results. Prefix a
line with "!" and a result number to record that result as selected.

Usage:
  python -m searchlight [SETTINGS_PATH]
"""

import asyncio
import sys
from pathlib import Path

from loguru import logger

from searchlight.config import build_app
from searchlight.utils.helpers import load_settings, setup_logging


def print_results(results):
    if not results:
        print("  (no results)")
    for index, result in enumerate(results, start=1):
        subtitle = f"  {result.subtitle}" if result.subtitle else ""
        print(f"  {index:>2}. [{result.provider_type.value}] {result.title} ({result.score:g}){subtitle}")


async def run(settings, settings_path):
    app = build_app(settings=settings, settings_path=settings_path)
    await app.start()

    results = []
    try:
        while True:
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line:
                break
            line = line.rstrip("\n")

            if line.startswith("!") and line[1:].strip().isdigit():
                index = int(line[1:].strip()) - 1
                if 0 <= index < len(results):
                    await app.engine.record_selection(results[index].identity)
                    print(f"  selected {results[index].title}")
                continue

            results = await app.engine.search(line)
            print_results(results)
    finally:
        await app.stop()


def main():
    settings_path = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    settings = load_settings(settings_path)
    setup_logging(settings["logging"]["level"])

    try:
        asyncio.run(run(settings, settings_path))
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
