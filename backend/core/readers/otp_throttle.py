import math
import threading
import time
from typing import Callable, Dict


class OtpThrottle:
    """按邮箱限制验证码发送频率（进程内）"""

    def __init__(self, cooldown_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._last_sent: Dict[str, float] = {}
        self._lock = threading.Lock()

    def retry_after(self, email: str) -> int:
        """距离下次允许发送还需等待的秒数，0 表示可以发送"""
        with self._lock:
            last = self._last_sent.get(email)
            if last is None:
                return 0
            remaining = self.cooldown_seconds - (self._clock() - last)
            return max(0, math.ceil(remaining))

    def hit(self, email: str) -> bool:
        """记录一次发送；冷却期内返回 False"""
        with self._lock:
            now = self._clock()
            last = self._last_sent.get(email)
            if last is not None and now - last < self.cooldown_seconds:
                return False
            self._last_sent[email] = now
            # 顺带清理过期记录
            expired = [k for k, v in self._last_sent.items() if now - v >= self.cooldown_seconds]
            for key in expired:
                if key != email:
                    del self._last_sent[key]
            return True

    def reset(self, email: str) -> None:
        with self._lock:
            self._last_sent.pop(email, None)
