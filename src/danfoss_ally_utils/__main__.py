#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Danfoss Ally Command Line Entry Point

Runs the client once: authenticate, fetch devices, report room temperatures.
With --poll the fetch-and-report cycle repeats every DANFOSS_POLLING_INTERVAL
seconds, renewing the token when it expires.

Usage:
    python -m danfoss_ally_utils [--poll] [--iterations N]

License: MIT
"""

import argparse
import asyncio
import logging
import sys
import threading
from typing import List, Optional

from .client import Client
from .config import Config, DEFAULT_LOG_LEVEL
from .exceptions import ConfigurationError, DanfossAllyError

logger = logging.getLogger("danfoss_ally_utils")


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="danfoss-ally",
        description="Print room temperatures reported by Danfoss Ally thermostats."
    )
    parser.add_argument("--poll", action="store_true", help="keep polling every DANFOSS_POLLING_INTERVAL seconds")
    parser.add_argument("--iterations", type=int, default=None, help="stop polling after N rounds")
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    """根日志器尚未配置时才调用 basicConfig"""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
        )
    else:
        root.setLevel(level)


async def main(argv: Optional[List[str]] = None) -> int:
    """
    依次执行 get_token → get_devices → print_room_temperatures。
    每个网络调用都放到线程中执行，不阻塞事件循环。

    Returns:
        int: 成功返回 0，任何客户端错误返回 1。
    """
    args = _parse_args(argv)

    # 先加载配置（包括 .env），日志级别才能取自 .env
    try:
        config = Config.from_env()
    except ConfigurationError as e:
        configure_logging(DEFAULT_LOG_LEVEL)
        logger.error("%s: %s", type(e).__name__, e)
        return 1
    configure_logging(config.log_level)

    # 任务被取消（例如 Ctrl-C）时通知轮询线程退出
    stop = threading.Event()
    try:
        with Client(config) as client:
            try:
                if args.poll:
                    await asyncio.to_thread(client.run, args.iterations, None, stop)
                else:
                    await asyncio.to_thread(client.get_token)
                    await asyncio.to_thread(client.get_devices)
                    client.print_room_temperatures()
            finally:
                stop.set()
    except DanfossAllyError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1
    return 0


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
