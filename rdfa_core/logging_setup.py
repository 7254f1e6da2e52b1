# rdfa_core/logging_setup.py
"""
Логирование для API и командной строки.

Уровень и формат берутся из блока "logging" в settings.json; обработчик вешается
только на логгеры проекта, корневой логгер приложения-хозяина не трогается.
"""
import logging
import sys
from typing import Optional, Union

from .document import SETTINGS

_HANDLER_NAME = "rdfa-stderr"


def init_logging(level: Optional[Union[int, str]] = None) -> None:
    cfg = SETTINGS["logging"]
    if level is None:
        level = cfg["level"]
    if isinstance(level, str):
        name, level = level, logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"unknown log level {name!r}")

    formatter = logging.Formatter(cfg["format"], datefmt=cfg["datefmt"])
    for name in cfg["loggers"]:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        handler = next((h for h in logger.handlers if h.get_name() == _HANDLER_NAME), None)
        if handler is None:
            handler = logging.StreamHandler()
            handler.set_name(_HANDLER_NAME)
            logger.addHandler(handler)
        # повторный вызов только перенастраивает уже добавленный обработчик
        handler.setStream(sys.stderr)
        handler.setFormatter(formatter)
