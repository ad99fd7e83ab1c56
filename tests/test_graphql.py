from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from gpl_core.errors import GraphQLError
from gpl_core.graphql import GraphQLClient, parse_timestamp


def _client(body=None, status_error=None):
    session = MagicMock()
    session.headers = {}
    response = session.post.return_value
    response.json.return_value = body
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    return GraphQLClient("http://indexer/v1/graphql", headers={"x-api-key": "k"}, timeout=3, session=session), session


def test_request_posts_query_and_variables():
    client, session = _client({"data": {"badge": []}})
    assert client.request("query Q { badge { address } }", {"holder": "h"}) == {"badge": []}
    session.post.assert_called_once_with(
        "http://indexer/v1/graphql",
        json={"query": "query Q { badge { address } }", "variables": {"holder": "h"}},
        timeout=3,
    )
    assert session.headers["x-api-key"] == "k"


def test_request_without_variables():
    client, session = _client({"data": {"issuer": []}})
    client.request("query Q { issuer { address } }")
    assert session.post.call_args.kwargs["json"]["variables"] == {}


def test_graphql_errors_raise():
    client, _ = _client({"errors": [{"message": "field 'nope' not found"}]})
    with pytest.raises(GraphQLError) as exc:
        client.request("query Q { nope }")
    assert "field 'nope' not found" in str(exc.value)


def test_http_errors_propagate_unchanged():
    err = requests.HTTPError("503 Service Unavailable")
    client, _ = _client(status_error=err)
    with pytest.raises(requests.HTTPError) as exc:
        client.request("query Q { badge { address } }")
    assert exc.value is err


def test_parse_timestamp():
    assert parse_timestamp(None) is None
    assert parse_timestamp("2023-03-01T10:00:00Z") == datetime(2023, 3, 1, 10, 0, tzinfo=timezone.utc)
    assert parse_timestamp("2023-03-01T10:00:00") == datetime(2023, 3, 1, 10, 0)


def test_parse_timestamp_short_fraction():
    assert parse_timestamp("2023-03-01T10:00:00.12345+00:00") == datetime(
        2023, 3, 1, 10, 0, 0, 123450, tzinfo=timezone.utc
    )
    assert parse_timestamp("2023-03-01T10:00:00.5Z") == datetime(2023, 3, 1, 10, 0, 0, 500000, tzinfo=timezone.utc)
