from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

M = TypeVar("M", bound=BaseModel)


class LatestValueStore(Generic[M]):
    """Latest model published by a poller.

    A poll replaces the value whole, so readers never see a mix of old and
    new fields.
    """

    def __init__(self, initial: M):
        self._value = initial

    def read(self) -> M:
        return self._value.model_copy(deep=True)

    def replace(self, value: M) -> None:
        self._value = value
