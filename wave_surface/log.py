"""
Logger factory.

Log output goes to stderr, so it only shows up around the animation, never
inside a frame.
"""

import logging

import colorlog


class Log:
    """
    Call get() for a cached logger per tag. Colored output can be
    enabled before the first logger is created.
    """

    _LOGGERS = {}
    _use_color = False
    _level = logging.WARNING

    @classmethod
    def get(cls, tag):
        if tag not in cls._LOGGERS:
            if cls._use_color:
                handler = colorlog.StreamHandler()
                handler.setFormatter(colorlog.ColoredFormatter(
                    ' %(log_color)s%(name)s/%(levelname)-8s%(reset)s |'
                    ' %(log_color)s%(message)s%(reset)s'))
            else:
                handler = logging.StreamHandler()
                handler.setFormatter(logging.Formatter(
                    ' %(name)s/%(levelname)-8s | %(message)s'))

            logger = logging.getLogger(tag)
            logger.addHandler(handler)
            logger.setLevel(cls._level)
            logger.propagate = False

            cls._LOGGERS[tag] = logger

        return cls._LOGGERS[tag]

    @classmethod
    def enable_color(cls, enable):
        cls._use_color = enable

    @classmethod
    def set_level(cls, level):
        cls._level = level
        for logger in cls._LOGGERS.values():
            logger.setLevel(level)
