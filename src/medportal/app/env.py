from __future__ import annotations

import os
import warnings
from enum import StrEnum
from functools import cache
from typing import TypeVar

T = TypeVar("T")


class Env(StrEnum):
    LOCAL = "local"
    DEV   = "dev"
    TEST  = "test"
    PROD  = "prod"


# Aliases accepted in APP_ENV
SYNONYMS: dict[str, Env] = {
    "development": Env.DEV,
    "testing": Env.TEST,
    "staging": Env.TEST,
    "production": Env.PROD,
}


@cache
def get_env() -> Env:
    """
    Resolve APP_ENV once; unset or unknown values mean "local".
    """
    raw = (os.getenv("APP_ENV") or "").strip().lower()
    if not raw:
        return Env.LOCAL
    if raw in SYNONYMS:
        return SYNONYMS[raw]
    try:
        return Env(raw)
    except ValueError:
        warnings.warn(
            f"Unrecognized environment '{raw}', defaulting to 'local'.",
            RuntimeWarning,
            stacklevel=2,
        )
        return Env.LOCAL


def is_prod() -> bool:
    return get_env() is Env.PROD


def pick(*, prod: T, nonprod: T) -> T:
    """
    Choose a default by environment.

    Example:
        level = pick(prod="INFO", nonprod="DEBUG")
    """
    return prod if is_prod() else nonprod
