"""pkgresolver 日志配置

提供统一的日志配置，支持普通文本和结构化 JSON 两种输出格式。
子模块解析在子进程中运行，父进程通过环境变量把同样的格式传递下去。
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone

LOG_LEVEL_ENV = "PKGRESOLVER_LOG_LEVEL"
LOG_JSON_ENV = "PKGRESOLVER_LOG_JSON"


class JSONFormatter(logging.Formatter):
    """结构化 JSON 日志格式器，便于 CI 流水线消费

    输出格式:
        {
            "timestamp": "2024-01-01T12:00:00+00:00",
            "level": "INFO",
            "logger": "pkgresolver.core.pkg.resolver",
            "message": "log message",
            "function": "resolve",
            "line": 42,
            "pid": 12345,
            "exception": "traceback..." (仅在有异常时)
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            # 记录事件发生时间而非格式化时间
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
            "pid": record.process,
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """配置根日志器

    参数:
        level: 日志级别字符串（DEBUG, INFO, WARNING, ERROR, CRITICAL）
        json_output: 为 True 时使用 JSON 格式（适用于 CI），否则使用人类可读格式

    说明:
        - 输出到 stderr，stdout 留给命令结果
        - 自动清理已有 handlers，避免重复输出
    """
    root = logging.getLogger()

    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)

    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        # 子模块子进程共用同一个 stderr，用进程号区分各自的输出
        fmt = "%(asctime)s [%(levelname)-7s] [%(process)d] %(name)s: %(message)s"
        handler.setFormatter(logging.Formatter(fmt))

    root.addHandler(handler)


def reset_logging() -> None:
    """清理所有已注册的 handlers，恢复到未配置状态（测试用）"""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()


def setup_logging_from_env() -> None:
    """按环境变量配置日志；子模块子进程继承父进程的环境，因而输出格式一致"""
    setup_logging(
        level=os.getenv(LOG_LEVEL_ENV, "INFO"),
        json_output=os.getenv(LOG_JSON_ENV, "") == "1",
    )
