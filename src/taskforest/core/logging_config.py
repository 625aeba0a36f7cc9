"""日志配置 -- structlog 处理器链、渲染模式与日志上下文字段

CLI 与 gateway 共用同一条处理器链。除时间戳、级别等通用字段外：
- task_cache_invalidated 事件附加 stale_total（三个分区的 Stale 数之和）
- progress 字段统一保留两位小数
- 请求、会话用户与任务 trace 字段只通过本模块的 bind_* 函数写入 contextvars

环境变量：
- TASKFOREST_LOG_FORMAT: dev（默认，彩色控制台）/ json / plain（key=value，适合 CLI 管道）
- TASKFOREST_LOG_LEVEL: 默认 INFO；DEBUG 时可见 progress_computed 与缓存丢弃事件
"""

import logging
import os

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from .models.enums import ALL_PARTITIONS

# 即使 DEBUG 也只保留 WARNING 以上的第三方 logger（aiosqlite 每条 SQL 都打 DEBUG）
_QUIET_LOGGERS = ("aiosqlite",)


def add_invalidation_fanout(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """为缓存失效事件汇总各分区的 Stale 条目数"""
    if event_dict.get("event") == "task_cache_invalidated":
        event_dict["stale_total"] = sum(
            int(event_dict.get(partition.value, 0)) for partition in ALL_PARTITIONS
        )
    return event_dict


def round_progress(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """进度百分比保留两位小数（33.333... -> 33.33）"""
    progress = event_dict.get("progress")
    if isinstance(progress, float):
        event_dict["progress"] = round(progress, 2)
    return event_dict


def bind_request_context(
    request_id: str,
    method: str,
    path: str,
    user_id: str | None,
) -> None:
    """开始处理新请求：清空旧上下文并绑定请求与会话用户"""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        method=method,
        path=path,
        user_id=user_id,
    )


def bind_task_trace(task_id: str) -> None:
    """同一任务的读写共享 trace_id"""
    structlog.contextvars.bind_contextvars(trace_id=f"trace-{task_id}")


def _build_renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    if log_format == "plain":
        return structlog.processors.KeyValueRenderer(
            key_order=["timestamp", "level", "event", "task_id"],
            drop_missing=True,
        )
    return structlog.dev.ConsoleRenderer()


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """初始化 structlog，并把标准库 logging 接到同一渲染器上

    Args:
        log_format: 渲染模式，缺省读取 TASKFOREST_LOG_FORMAT
        log_level: 日志级别，缺省读取 TASKFOREST_LOG_LEVEL
    """
    log_format = log_format or os.environ.get("TASKFOREST_LOG_FORMAT", "dev")
    log_level = log_level or os.environ.get("TASKFOREST_LOG_LEVEL", "INFO")
    level = getattr(logging, log_level.upper(), logging.INFO)

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        round_progress,
        add_invalidation_fanout,
        structlog.processors.StackInfoRenderer(),
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _build_renderer(log_format),
            ],
            foreign_pre_chain=pre_chain,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
