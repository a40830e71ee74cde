# models and outcome types to keep data shapes explicit and reusable across the app

from __future__ import annotations
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")

@dataclass(frozen=True)
class Weather:
    # immutable value object for one forecast entry, all fields arrive as strings
    icon: str
    temp: str
    date: str

@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

@dataclass(frozen=True)
class Failure:
    # error is always one of the client.SessionError subclasses
    error: Exception

    @property
    def ok(self) -> bool:
        return False

Result = Union[Success[T], Failure]
