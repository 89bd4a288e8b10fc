import asyncio
import threading
from typing import Optional

from core.common.app_settings import settings
from core.common.log import logger
from core.lifecycle import sweep_hot_articles

_stop_event = threading.Event()


def run_sweep_once() -> int:
    try:
        return asyncio.run(sweep_hot_articles())
    except Exception as e:
        logger.error(f"生命周期巡检失败: {e}")
        return 0


def lifecycle_loop(interval: Optional[int] = None) -> None:
    """定时把 hot 文章降为 cold，直到 stop_lifecycle_job 被调用"""
    interval = interval or settings.lifecycle_interval_seconds
    logger.info(f"生命周期巡检已启动，间隔 {interval} 秒")
    while not _stop_event.is_set():
        run_sweep_once()
        _stop_event.wait(interval)
    logger.info("生命周期巡检已停止")


def start_lifecycle_job() -> threading.Thread:
    _stop_event.clear()
    thread = threading.Thread(target=lifecycle_loop, name="lifecycle-sweep", daemon=True)
    thread.start()
    return thread


def stop_lifecycle_job() -> None:
    _stop_event.set()
