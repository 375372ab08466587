from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict

EXTRA_MODES = ("allow", "forbid", "ignore")


def extra_mode(environ=os.environ) -> str:
    """Pydantic ``extra`` setting from NOTEFEED_EXTRA; unknown values mean ignore."""
    mode = environ.get("NOTEFEED_EXTRA", "").strip().lower()
    return mode if mode in EXTRA_MODES else "ignore"


class RowModel(BaseModel):
    """
    Base model for rows and payloads exchanged with the gateway.

    Unknown columns are ignored by default; set NOTEFEED_EXTRA=forbid before
    import to catch schema drift during development.
    """

    model_config = ConfigDict(extra=extra_mode())


__all__ = ["RowModel", "extra_mode"]
