"""
패키지 로깅 설정

하위 모듈은 logging.getLogger(__name__)만 호출하고, 출력 대상은
여기서 'regsampler' 루트 로거에 한 번 붙인다.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = '[%(asctime)s] %(levelname)s - %(name)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str = "regsampler",
                 level: int = logging.INFO,
                 log_file: bool = False,
                 log_dir: Union[str, Path] = "logs") -> logging.Logger:
    """
    로거 설정

    이미 핸들러가 붙어 있으면 그대로 반환 (중복 출력 방지).

    Args:
        name: 로거 이름
        level: 로깅 레벨
        log_file: True면 log_dir/{name}_YYYYMMDD.log 에도 기록
        log_dir: 로그 파일 폴더
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(level)
    # 상위(root) 로거로 중복 전파하지 않음
    logger.propagate = False
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(
            log_dir / f"{name}_{datetime.now():%Y%m%d}.log",
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def set_log_level(level: Union[int, str], name: str = "regsampler") -> logging.Logger:
    """패키지 로거와 핸들러 레벨 변경 ('DEBUG', logging.WARNING 등)"""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"알 수 없는 로깅 레벨: {level}")
        level = resolved
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
    return logger


def get_log_file(name: str = "regsampler") -> Optional[Path]:
    """파일 핸들러가 있으면 그 경로"""
    for handler in logging.getLogger(name).handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)
    return None


# 패키지 로거 (하위 모듈은 logging.getLogger(__name__)로 전파)
logger = setup_logger()
