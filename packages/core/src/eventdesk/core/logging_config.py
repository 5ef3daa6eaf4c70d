"""structlog 配置模块 -- CLI 与宿主进程共用

dev 模式：pretty print 可读输出
json 模式：每行一个 JSON 对象，便于采集
日志统一带上当前活动集合键（collection_key），多个集合共用一个进程时可区分来源。
"""

import logging
import os
import sys
from typing import TextIO

import structlog

LOG_FORMATS = ("dev", "json")

# aiosqlite 在 DEBUG 级别逐条记录 SQL，整体写入时会淹没业务日志
_NOISY_LOGGERS = ("aiosqlite",)


def setup_logging(
    collection_key: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """初始化 structlog 配置

    根据 EVENTDESK_LOG_FORMAT 环境变量选择渲染模式（未知值按 dev 处理），
    EVENTDESK_LOG_LEVEL 控制级别。

    Args:
        collection_key: 绑定到日志上下文的集合键
        stream: 日志输出流，默认 stderr（CLI 的结果输出走 stdout）
    """
    log_format = os.environ.get("EVENTDESK_LOG_FORMAT", "dev").lower()
    if log_format not in LOG_FORMATS:
        log_format = "dev"
    level = getattr(logging, os.environ.get("EVENTDESK_LOG_LEVEL", "INFO").upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer(
            ensure_ascii=False
        )
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=(stream or sys.stderr).isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))

    structlog.contextvars.clear_contextvars()
    if collection_key:
        structlog.contextvars.bind_contextvars(collection_key=collection_key)
