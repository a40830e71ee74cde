# stub transport so no test ever hits the network

import pytest
import requests


def make_response(status_code, body=b"", url="https://example.test/api/v2/items"):
    # hand-built response, exactly what requests would hand back after reading the body
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = body
    resp.url = url
    resp.encoding = "utf-8"
    return resp


class StubHttp(requests.Session):
    # answers every send with a canned response, or raises a canned exception
    def __init__(self, outcome):
        super().__init__()
        self.outcome = outcome
        self.sent = []

    def send(self, request, **kwargs):
        self.sent.append((request, kwargs))
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


@pytest.fixture
def stub_session():
    # builds a weatherclient Session wired to a StubHttp, closed after the test
    from weatherclient.client import Session

    created = []

    def build(outcome, **kwargs):
        http = StubHttp(outcome)
        session = Session(session_factory=lambda: http, **kwargs)
        created.append(session)
        return session, http

    yield build
    for session in created:
        session.close()
