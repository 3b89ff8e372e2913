"""Tests for the FastAPI dependency providers."""
from unittest.mock import Mock

from shelfwise.clients.book_search import BookSearchClient
from shelfwise.dependencies import get_search_provider


def test_each_request_gets_its_own_search_client():
    first_request = get_search_provider()
    second_request = get_search_provider()
    first = next(first_request)
    second = next(second_request)

    assert isinstance(first, BookSearchClient)
    assert first is not second
    assert first.session is not second.session

    first.session.cookies.set("NID", "user-a-cookie", domain=".google.com")
    assert "NID" not in second.session.cookies

    first_request.close()
    second_request.close()


def test_search_client_session_closed_after_request():
    request = get_search_provider()
    client = next(request)
    client.session = Mock()

    assert next(request, None) is None
    client.session.close.assert_called_once_with()
