# the concrete weather endpoint and the helpers the cli builds on

from __future__ import annotations
import os
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, List
from .client import Completion, Session
from .models import Result, Success, Weather
from .requestable import HttpMethod, Requestable

DEFAULT_BASE_URL = "https://qiita.com"

def _base_url() -> str:
    return os.getenv("WEATHER_API_BASE_URL") or DEFAULT_BASE_URL

@dataclass(frozen=True)
class WeatherApiRequestable(Requestable[List[Weather]]):
    base_url: str = field(default_factory=_base_url)
    path: str = "/api/v2/items"
    http_method: HttpMethod = HttpMethod.GET

def get_weather(session: Session, completion: Completion) -> Future:
    return session.send(WeatherApiRequestable(), completion)

def describe(result: Result[Any]) -> str:
    # success reports how many entries came back, failure reports the error
    if isinstance(result, Success):
        return str(len(result.value))
    return str(result.error)
