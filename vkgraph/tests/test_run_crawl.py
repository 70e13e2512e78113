"""
Tests for the crawl entry point's control flow (no network, no Neo4j).
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from neo4j.exceptions import ServiceUnavailable

from vkgraph import run_crawl
from vkgraph.config import Settings
from vkgraph.exceptions import NotFound
from vkgraph.models import GraphFragment
from vkgraph.services import PersistReport
from vkgraph.tests.fakes import person


@pytest.fixture
def settings():
    return Settings(_env_file=None, access_token="token")


@pytest.fixture
def persist_calls(monkeypatch):
    calls = []

    async def fake_persist(settings, fragment, show):
        calls.append((fragment, show))
        return run_crawl.EXIT_OK

    monkeypatch.setattr(run_crawl, 'persist', fake_persist)
    return calls


@pytest.mark.asyncio
async def test_seed_not_found_never_persists(monkeypatch, settings, persist_calls):
    async def failing_discover(settings, args):
        raise NotFound("users.get: no user 1")

    monkeypatch.setattr(run_crawl, 'discover', failing_discover)

    code = await run_crawl.run(['--user-id', '1'], settings)

    assert code == run_crawl.EXIT_DISCOVERY_FAILED
    assert persist_calls == []


@pytest.mark.asyncio
async def test_discovered_fragment_is_persisted(monkeypatch, settings, persist_calls):
    fragment = GraphFragment(root=person(1))

    async def fake_discover(settings, args):
        assert args.user_id == 1
        assert args.depth == 3
        return fragment

    monkeypatch.setattr(run_crawl, 'discover', fake_discover)

    code = await run_crawl.run(['--user-id', '1', '--depth', '3', '--show', '5'], settings)

    assert code == run_crawl.EXIT_OK
    assert persist_calls == [(fragment, 5)]


@pytest.mark.asyncio
async def test_no_persist_flag(monkeypatch, settings, persist_calls):
    async def fake_discover(settings, args):
        return GraphFragment(root=person(1))

    monkeypatch.setattr(run_crawl, 'discover', fake_discover)

    code = await run_crawl.run(['--no-persist'], settings)

    assert code == run_crawl.EXIT_OK
    assert persist_calls == []


@pytest.mark.asyncio
async def test_listing_failure_after_persist_is_not_fatal(monkeypatch, settings, capsys):
    neo4j = MagicMock()
    neo4j.close = AsyncMock()

    async def fake_create(config):
        return neo4j

    monkeypatch.setattr(run_crawl, 'create_neo4j_service', fake_create)
    monkeypatch.setattr(run_crawl.SocialGraphRepository, 'ensure_schema', AsyncMock())
    monkeypatch.setattr(
        run_crawl.SocialGraphRepository, 'list_persons',
        AsyncMock(side_effect=ServiceUnavailable("connection lost")),
    )
    monkeypatch.setattr(run_crawl.GraphUpserter, 'persist', AsyncMock(return_value=PersistReport()))

    code = await run_crawl.persist(settings, GraphFragment(root=person(1)), show=5)

    assert code == run_crawl.EXIT_OK
    assert "Data saved to Neo4j" in capsys.readouterr().out
    neo4j.close.assert_awaited_once()
