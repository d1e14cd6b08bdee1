"""Pytest configuration and fixtures."""
import asyncio
import copy
import json

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.main import app
from app.tracker import Tracker, get_tracker


PANTRY_ID = "pantry-123"


class FakeCollection:
    """
    In-memory stand-in for the Motor calls the local store makes.

    Every call yields to the event loop, as a real driver round trip does.
    """

    def __init__(self):
        self.docs = {}

    async def find_one(self, query):
        await asyncio.sleep(0)
        doc = self.docs.get(query["_id"])
        return copy.deepcopy(doc)

    async def update_one(self, query, update, upsert=False):
        await asyncio.sleep(0)
        key = query["_id"]
        if key not in self.docs:
            if not upsert:
                return
            self.docs[key] = {"_id": key}
        self.docs[key].update(copy.deepcopy(update["$set"]))

    async def delete_one(self, query):
        await asyncio.sleep(0)
        self.docs.pop(query["_id"], None)


class FakeDatabase:
    """Dictionary of fake collections keyed by name."""

    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection())


class FakePantry:
    """Pantry API emulated through an httpx mock transport."""

    def __init__(self, pantry_id=PANTRY_ID):
        self.pantry_id = pantry_id
        self.baskets = {}
        self.offline = False
        self.requests = []
        # Seconds to hold each successive POST before storing it
        self.post_delays = []

    async def handler(self, request: httpx.Request) -> httpx.Response:
        if self.offline:
            raise httpx.ConnectError("offline", request=request)
        self.requests.append(request)

        parts = request.url.path.strip("/").split("/")
        # /apiv1/pantry/{id}[/basket/{name}]
        pantry_id, rest = parts[2], parts[3:]
        if pantry_id != self.pantry_id:
            return httpx.Response(400, json={"error": "pantry not found"})

        if not rest:
            return httpx.Response(200, json={"name": "test", "baskets": list(self.baskets)})

        basket = rest[1]
        if request.method == "POST":
            if self.post_delays:
                await asyncio.sleep(self.post_delays.pop(0))
            self.baskets[basket] = json.loads(request.content)
            return httpx.Response(200, text=f"Your Pantry was updated with basket: {basket}!")

        if basket not in self.baskets:
            return httpx.Response(400, json={"error": "basket does not exist"})
        return httpx.Response(200, json=self.baskets[basket])

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_db():
    """Fresh in-memory database."""
    return FakeDatabase()


@pytest.fixture
def pantry():
    """Fresh emulated pantry."""
    return FakePantry()


@pytest_asyncio.fixture
async def make_client(fake_db, pantry):
    """
    Factory for a test client over a started tracker.

    The tracker uses the in-memory database and the emulated pantry; pass
    remote=True to start with the pantry bound.
    """
    trackers = []
    clients = []

    async def _make(remote: bool = False) -> AsyncClient:
        if remote:
            await fake_db["kv_store"].update_one(
                {"_id": "pantry_id"}, {"$set": {"value": PANTRY_ID}}, upsert=True
            )
        test_tracker = Tracker()
        await test_tracker.start(fake_db, http=pantry.client())
        trackers.append(test_tracker)
        app.dependency_overrides[get_tracker] = lambda: test_tracker

        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()
    for test_tracker in trackers:
        await test_tracker.stop()
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def app_client(make_client):
    """Test client in local-only mode."""
    return await make_client()
