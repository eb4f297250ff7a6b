"""Runtime configuration for the ``jl`` command."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from typing import Mapping

LOG_LEVEL_ENV = "JL_LOG_LEVEL"


@dataclass(slots=True)
class Config:
    fieldsep: str = "\t"
    log_level: str = "WARNING"
    encoding: str = "utf-8"

    @classmethod
    def from_args(cls, args: argparse.Namespace, environ: Mapping[str, str]) -> Config:
        """Build a Config from parsed arguments and the environment.

        ``-v`` wins over ``JL_LOG_LEVEL``; unknown level names fall back
        to WARNING.
        """
        if args.verbose:
            level = "DEBUG"
        else:
            level = environ.get(LOG_LEVEL_ENV, "WARNING").upper()
            if not isinstance(logging.getLevelName(level), int):
                level = "WARNING"
        return cls(fieldsep=args.fieldsep, log_level=level)
