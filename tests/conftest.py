"""Shared fixtures: a scripted fake UAA behind httpx.MockTransport."""

import json

import httpx
import pytest

from uaa_scim import JsonHttp, Scim

TARGET = "https://uaa.example.com"
AUTH = "bearer test-token"


class FakeUAA:
    """Returns queued replies in order and records every request it receives."""

    def __init__(self):
        self.replies = []
        self.requests: list[httpx.Request] = []

    def reply(self, status=200, body=None, headers=None):
        self.replies.append((status, body, headers))
        return self

    def page(self, resources, total=None, start=None, per_page=None):
        body = {"resources": resources}
        if total is not None:
            body["totalResults"] = total
        if start is not None:
            body["startIndex"] = start
        if per_page is not None:
            body["itemsPerPage"] = per_page
        return self.reply(200, body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        assert self.replies, f"unexpected request {request.method} {request.url}"
        status, body, headers = self.replies.pop(0)
        if body is None:
            return httpx.Response(status, headers=headers)
        if isinstance(body, str):
            return httpx.Response(status, text=body, headers=headers)
        return httpx.Response(status, json=body, headers=headers)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def body_of(request: httpx.Request):
    return json.loads(request.content)


@pytest.fixture
def fake_uaa():
    return FakeUAA()


@pytest.fixture
def http(fake_uaa):
    with httpx.Client(transport=httpx.MockTransport(fake_uaa)) as client:
        yield JsonHttp(client)


@pytest.fixture
def scim(http):
    return Scim(TARGET, AUTH, http=http)
