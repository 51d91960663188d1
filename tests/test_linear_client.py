"""
Tests for the Linear GraphQL client
"""

from unittest.mock import AsyncMock, patch

import pytest

from nextup.integrations.linear import CLOSED_STATE_TYPES, LinearClient


def page(identifiers, has_next=False, cursor=None):
    return {
        "issues": {
            "pageInfo": {"hasNextPage": has_next, "endCursor": cursor},
            "nodes": [{"identifier": i, "title": i} for i in identifiers],
        }
    }


class TestLinearClient:
    @pytest.mark.asyncio
    async def test_paginates(self):
        client = LinearClient("lin_test")
        post = AsyncMock(side_effect=[page(["ENG-1", "ENG-2"], True, "c1"), page(["ENG-3"])])

        with patch.object(client, "_post", post):
            issues = await client.list_open_issues(team="ENG")

        assert [i["identifier"] for i in issues] == ["ENG-1", "ENG-2", "ENG-3"]
        first_vars = post.call_args_list[0][0][1]
        assert first_vars["cursor"] is None
        assert first_vars["filter"]["team"] == {"key": {"eq": "ENG"}}
        assert first_vars["filter"]["state"]["type"]["nin"] == CLOSED_STATE_TYPES
        assert post.call_args_list[1][0][1]["cursor"] == "c1"

    @pytest.mark.asyncio
    async def test_page_limit(self):
        client = LinearClient("lin_test", max_pages=2)
        post = AsyncMock(side_effect=[page(["A-1"], True, "c1"), page(["A-2"], True, "c2")])

        with patch.object(client, "_post", post):
            issues = await client.list_open_issues()

        assert len(issues) == 2
        assert post.call_count == 2
        assert "team" not in post.call_args_list[0][0][1]["filter"]

    @pytest.mark.asyncio
    async def test_requires_context(self):
        with pytest.raises(RuntimeError, match="not connected"):
            await LinearClient("lin_test").list_open_issues()

    @pytest.mark.asyncio
    async def test_context_manager_closes_session(self):
        async with LinearClient("lin_test") as client:
            assert client._session is not None
        assert client._session is None
