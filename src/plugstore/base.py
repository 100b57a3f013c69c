from __future__ import annotations

from typing import Any


class _Absent:
    """Brief: Singleton marker for "no value" inside the store pipeline.

    Inputs:
      - None.

    Outputs:
      - The single ABSENT instance (falsy, compares by identity).

    Notes:
      - Plugins receive ABSENT from on_get() when a key holds no data, which
        keeps legitimately stored None/0/""/False values distinguishable from
        a missing key.
    """

    _instance: "_Absent | None" = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __copy__(self) -> "_Absent":
        return self

    def __deepcopy__(self, memo: dict) -> "_Absent":
        return self

    def __reduce__(self) -> str:
        return "ABSENT"


ABSENT: Any = _Absent()
