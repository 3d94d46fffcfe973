"""Error-absorbing wrappers for optional operations.

Recipe generation is best-effort: a failing step is logged and replaced with
a default (usually None, meaning "try the next strategy"). Cancellation is not
an Exception subclass and always propagates.
"""

from typing import Any, Awaitable, Callable, Optional, TypeVar

from src.utils.logger import logger

T = TypeVar("T")


def _log_error(operation_name: str, exception: BaseException, log_level: str = "warning") -> None:
    """Log error with appropriate level.

    Args:
        operation_name: Description for logging
        exception: Exception that occurred
        log_level: Logging level ("debug", "warning", "error"). Default: "warning".
    """
    msg = f"{operation_name}: {exception}"
    if log_level == "debug":
        logger.debug(msg)
    elif log_level == "error":
        logger.error(msg)
    else:
        logger.warning(msg)


async def safe_execute_async(
    coro: Awaitable[T],
    operation_name: str,
    log_level: str = "warning",
    default_return: Optional[Any] = None,
):
    """Await a coroutine, logging and absorbing any exception.

    Args:
        coro: Awaitable to execute.
        operation_name: Description for logging (e.g., "Motivation prediction").
        log_level: Logging level ("debug", "warning", "error"). Default: "warning".
        default_return: Value returned on exception. Default: None.

    Returns:
        Result of the awaitable, or default_return on failure.
    """
    try:
        return await coro
    except Exception as e:
        _log_error(operation_name, e, log_level)
        return default_return


def safe_execute_sync(
    func: Callable[[], T],
    operation_name: str,
    log_level: str = "warning",
    default_return: Optional[Any] = None,
):
    """Synchronous version of safe_execute_async.

    Args:
        func: Callable to execute (no args).
        operation_name: Description for logging.
        log_level: Logging level ("debug", "warning", "error"). Default: "warning".
        default_return: Value returned on exception. Default: None.

    Returns:
        Result of func, or default_return on failure.
    """
    try:
        return func()
    except Exception as e:
        _log_error(operation_name, e, log_level)
        return default_return
