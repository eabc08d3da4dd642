"""
Shared pytest fixtures for pgrest tests.
"""

import dataclasses
import json
from typing import Callable, List

import httpx
import pytest

from pgrest import Agent, AsyncAgent, Config, JWSSigner
from pgrest.signer import SignerInterface
from pgrest.transport import AsyncHTTPXTransport, HTTPXTransport


TEST_TABLE = "test_table"
MASTER_URL = "http://master.test"
SLAVE_URL = "http://slave.test"
# HS256 secrets must be at least 32 bytes
MASTER_SECRET = "master-secret-with-at-least-32-chars"
SLAVE_SECRET = "slave-secret-with-at-least-32-chars"

TEST_OBJECT = {
    "id": 12345678900,
    "first_name": "Test",
    "last_name": "Testerson",
    "email": "ttesterson@tester.test",
    "phone_number": "(000)000-0000",
}


@dataclasses.dataclass
class Person:
    id: int
    first_name: str
    last_name: str
    email: str
    phone_number: str


class PostgrestStub:
    """
    In-process stand-in for a PostgREST table endpoint.

    Only `test_table` (and the service root) exist. `?error=N` forces
    status N. POST echoes the request body when the representation is
    requested. Every request received is recorded.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if TEST_TABLE not in request.url.path and request.url.path != "/":
            return httpx.Response(404, text="Not Found")

        code = int(request.url.params.get("error", "0") or 0)
        if code > 0:
            return httpx.Response(code, text=httpx.codes.get_reason_phrase(code))

        if request.method == "GET":
            return httpx.Response(200, json=TEST_OBJECT)
        if request.method == "DELETE":
            return httpx.Response(200, text="OK")
        if request.method == "POST":
            if request.headers.get("Prefer") == "return=representation":
                return httpx.Response(201, content=request.content)
            return httpx.Response(201, text="Created")
        if request.method == "PATCH":
            return httpx.Response(204)
        return httpx.Response(500, text="Internal Server Error")

    @property
    def hosts(self) -> List[str]:
        return [request.url.host for request in self.requests]


class FailingSigner(SignerInterface):
    """Signer that always raises the same error."""

    def __init__(self):
        self.error = RuntimeError("mock error")

    def sign(self, claims, secret):
        raise self.error


class RecordingSigner(SignerInterface):
    """Signer that records the claims and secrets it was asked to sign."""

    def __init__(self):
        self.calls = []

    def sign(self, claims, secret):
        self.calls.append((claims, secret))
        return "secret"


@pytest.fixture
def config() -> Config:
    """A valid config pointing master and slave at distinct hosts."""
    return Config(
        issuer="test",
        master_base_url=MASTER_URL,
        master_role="masterRole",
        master_secret=MASTER_SECRET,
        slave_base_url=SLAVE_URL,
        slave_role="slaveRole",
        slave_secret=SLAVE_SECRET,
        timeout=5,
    )


@pytest.fixture
def stub() -> PostgrestStub:
    """A fresh PostgREST stub."""
    return PostgrestStub()


@pytest.fixture
def transport(stub: PostgrestStub) -> HTTPXTransport:
    """A transport whose client is wired to the stub."""
    return HTTPXTransport(client=httpx.Client(transport=httpx.MockTransport(stub)))


@pytest.fixture
def signer() -> JWSSigner:
    """The stock HS256 signer."""
    return JWSSigner()


@pytest.fixture
def make_agent(config: Config, transport: HTTPXTransport, signer: JWSSigner) -> Callable[..., Agent]:
    """Factory for Agents whose config overrides selected fields."""

    def factory(signer_override: SignerInterface = None, **overrides) -> Agent:
        return Agent(
            dataclasses.replace(config, **overrides), transport, signer_override or signer
        )

    return factory


@pytest.fixture
def agent(make_agent) -> Agent:
    """An Agent talking to the stub."""
    return make_agent()


@pytest.fixture
def make_async_agent(config: Config, stub: PostgrestStub, signer: JWSSigner):
    """Factory for AsyncAgents talking to the stub."""

    def factory(signer_override: SignerInterface = None, **overrides) -> AsyncAgent:
        client = httpx.AsyncClient(transport=httpx.MockTransport(stub))
        return AsyncAgent(
            dataclasses.replace(config, **overrides),
            AsyncHTTPXTransport(client=client),
            signer_override or signer,
        )

    return factory


def bearer_token(request: httpx.Request) -> str:
    """Extract the bearer token from a request's Authorization header."""
    scheme, _, token = request.headers["Authorization"].partition(" ")
    assert scheme == "Bearer"
    return token


def request_json(request: httpx.Request):
    return json.loads(request.content)
