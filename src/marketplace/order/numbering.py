"""Order numbers: ``<prefix>-<epoch milliseconds>-<random suffix>``.

Unique with high probability only. Two orders placed in the same millisecond can
collide, and nothing checks for it.
"""

import random
import time

from marketplace import config


def generate_order_number(now_ms=None, prefix=None) -> str:
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = random.randint(0, config.ORDER_NUMBER_SUFFIX_MAX)
    return f"{prefix or config.ORDER_NUMBER_PREFIX}-{now_ms}-{suffix}"
