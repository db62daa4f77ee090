"""loguru 初始化：控制台彩色输出，配置了 LOG_FILE 时另写滚动文件"""
import sys
from pathlib import Path
from typing import Optional
from loguru import logger
from app.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logger(level: Optional[str] = None, log_file: Optional[str] = None):
    """
    重新挂载 loguru 输出

    Args:
        level: 日志级别，默认 settings.log_level
        log_file: 日志文件路径，默认 settings.log_file；为空字符串时不写文件（如只读文件系统）
    """
    level = level or settings.log_level
    log_file = settings.log_file if log_file is None else log_file

    logger.remove()
    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=level, colorize=True, diagnose=settings.debug)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level=level,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            encoding="utf-8",
            diagnose=settings.debug,
        )

    return logger


setup_logger()
