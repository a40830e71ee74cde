# OOP boundary for external i/o
# one request per send, no retries, outcome always delivered through the completion
# use a thread-local session per ThreadPoolExecutor worker, same as any pooled requests client

from __future__ import annotations
import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from dotenv import load_dotenv

from .decoding import decode
from .models import Failure, Result, Success
from .requestable import Requestable

load_dotenv()  # in production, environment variables is injected by docker, kubernetes, cloud provider

logger = logging.getLogger(__name__)

Completion = Callable[[Result[Any]], Any]

class SessionError(RuntimeError):
    # common base so callers can tell our failures from their own bugs
    pass

class TransportError(SessionError):
    def __init__(self, cause: BaseException):
        super().__init__(f"Transport error: {cause}")
        self.cause = cause
        self.__cause__ = cause

class NoResponse(SessionError):
    def __init__(self) -> None:
        super().__init__("No HTTP response")

class UnacceptableStatus(SessionError):
    # the body is dropped on purpose, only the status code travels
    def __init__(self, status_code: int):
        super().__init__(f"Unacceptable status code: {status_code}")
        self.status_code = status_code

class NoData(SessionError):
    def __init__(self) -> None:
        super().__init__("Response body is empty")

class DecodeError(SessionError):
    def __init__(self, cause: BaseException):
        super().__init__(f"Could not decode response: {cause}")
        self.cause = cause
        self.__cause__ = cause

def _env_number(name: str, default: float, cast: Callable[[str], Any] = float) -> Any:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number (got {raw!r})") from exc

class Session:
    # the Session keeps no per-request state, only the pool and per-thread http sessions
    DEFAULT_TIMEOUT = 60.0
    DEFAULT_MAX_WORKERS = 4

    def __init__(
        self,
        timeout: float | None = None,
        max_workers: int | None = None,
        session_factory: Callable[[], requests.Session] | None = None,
    ):
        self.timeout = timeout if timeout is not None else _env_number("HTTP_TIMEOUT", self.DEFAULT_TIMEOUT)
        workers = max_workers if max_workers is not None else _env_number(
            "SESSION_MAX_WORKERS", self.DEFAULT_MAX_WORKERS, int
        )
        if workers < 1:
            raise ValueError(f"max_workers must be at least 1 (got {workers})")

        self._session_factory = session_factory or self._build_session

        # each worker thread lazily obtains its own session through _session()
        self._local = threading.local()
        self._sessions: list[requests.Session] = []
        self._sessions_lock = threading.Lock()

        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="weatherclient")

        # single attempt: no retry on connect, read or status
        self._retry = Retry(total=0, read=False, raise_on_status=False)

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _build_session(self) -> requests.Session:
        s = requests.Session()
        adapter = HTTPAdapter(max_retries=self._retry)
        s.mount("http://", adapter)
        s.mount("https://", adapter)
        return s

    def _session(self) -> requests.Session:
        # thread-local session creation
        sess = getattr(self._local, "session", None)
        if sess is None:
            sess = self._session_factory()
            self._local.session = sess
            with self._sessions_lock:
                self._sessions.append(sess)
        return sess

    def close(self) -> None:
        # waits for in-flight requests so every completion still runs
        self._executor.shutdown(wait=True)
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for sess in sessions:
            sess.close()

    def send(self, requestable: Requestable[Any], completion: Completion) -> Future:
        # completion runs exactly once on a worker thread, the future resolves to the same outcome
        try:
            return self._executor.submit(self._complete, requestable, completion)
        except RuntimeError as exc:
            # executor already shut down, deliver the failure on the caller's thread
            logger.warning("Session closed, request not sent: %r", requestable)
            future: Future = Future()
            try:
                future.set_result(self._complete_with(Failure(TransportError(exc)), completion))
            except Exception as callback_exc:
                future.set_exception(callback_exc)
            return future

    def _complete(self, requestable: Requestable[Any], completion: Completion) -> Result[Any]:
        return self._complete_with(self.fetch(requestable), completion)

    def _complete_with(self, result: Result[Any], completion: Completion) -> Result[Any]:
        try:
            completion(result)
        except Exception:
            logger.exception("Completion callback raised")
            raise
        return result

    def fetch(self, requestable: Requestable[Any]) -> Result[Any]:
        # synchronous pipeline: transport -> response -> status -> body -> decode
        method, url = "?", "?"
        try:
            method = requestable.http_method.value
            url = requestable.url()
            logger.debug("Sending %s %s", method, url)
            http = self._session()
            prepared = http.prepare_request(requests.Request(method, url))
            resp = http.send(prepared, timeout=self.timeout)
        except Exception as exc:
            # DNS, refused or reset connections, timeouts, and URLs that cannot be built
            logger.warning("Transport error for %s %s: %s", method, url, exc)
            return Failure(TransportError(exc))

        if not isinstance(resp, requests.Response) or not isinstance(resp.status_code, int):
            logger.warning("No HTTP response for %s %s", method, url)
            return Failure(NoResponse())

        if not 200 <= resp.status_code < 300:
            logger.warning("HTTP %s for %s %s", resp.status_code, method, url)
            return Failure(UnacceptableStatus(resp.status_code))

        if not resp.content:
            logger.warning("Empty body for %s %s", method, url)
            return Failure(NoData())

        try:
            payload = resp.json()
            value = decode(requestable.response_type, payload)
        except ValueError as exc:
            logger.warning("Decode error for %s %s: %s", method, url, exc)
            return Failure(DecodeError(exc))
        except Exception as exc:
            # nesting too deep for the json parser, or a shape decode() cannot handle
            logger.error("Decode failure for %s %s: %r", method, url, exc)
            return Failure(DecodeError(exc))

        logger.debug("Decoded %s %s (HTTP %s)", method, url, resp.status_code)
        return Success(value)
