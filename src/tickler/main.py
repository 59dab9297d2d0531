"""Tickler daemon entry point."""

import asyncio

from tickler.config import get_settings
from tickler.core.loop import run_daemon
from tickler.log import configure_logging

if __name__ == "__main__":
    configure_logging(get_settings().log_level)
    asyncio.run(run_daemon())
