"""
Tests for network_handler.py

socket.create_connection, sleep and log are patched so that no connection is opened, no time
is spent waiting and every logged attempt can be counted.
"""

import unittest.mock

import pytest

# following entities are tested in this module:
from bingsy.network_handler import verify_reachable
from bingsy.network_handler import split_service
from bingsy.network_handler import ReachabilityError


def attempts_logged(mock_log) -> int:
    return sum("unreachable" in call.args[0] for call in mock_log.call_args_list)


@unittest.mock.patch("bingsy.network_handler.log")
@unittest.mock.patch("bingsy.network_handler.sleep")
@unittest.mock.patch("bingsy.network_handler.socket.create_connection")
def test_verify_reachable_first_attempt(mock_connect, mock_sleep, mock_log):
    verify_reachable("www.bing.com:443", max_retries=5, retry_delay=10)

    mock_connect.assert_called_once_with(("www.bing.com", 443), timeout=1)
    mock_connect.return_value.close.assert_called_once()
    mock_sleep.assert_not_called()


@unittest.mock.patch("bingsy.network_handler.log")
@unittest.mock.patch("bingsy.network_handler.sleep")
@unittest.mock.patch("bingsy.network_handler.socket.create_connection")
def test_verify_reachable_third_attempt(mock_connect, mock_sleep, mock_log):
    """
    Succeeding on attempt 3 of 5 stops probing right there.
    """

    connection = unittest.mock.MagicMock()
    mock_connect.side_effect = [OSError("network down"), OSError("network down"), connection]

    verify_reachable("www.bing.com:443", max_retries=5, retry_delay=10)

    assert mock_connect.call_count == 3
    assert mock_sleep.call_args_list == [unittest.mock.call(10)] * 2
    assert attempts_logged(mock_log) == 2
    connection.close.assert_called_once()


@pytest.mark.parametrize("max_retries", [1, 3, 5])
@unittest.mock.patch("bingsy.network_handler.log")
@unittest.mock.patch("bingsy.network_handler.sleep")
@unittest.mock.patch("bingsy.network_handler.socket.create_connection")
def test_verify_reachable_exhausted(mock_connect, mock_sleep, mock_log, max_retries):
    """
    Failing every attempt logs exactly max_retries attempts, then raises.
    """

    mock_connect.side_effect = TimeoutError("timed out")

    with pytest.raises(ReachabilityError, match="www.bing.com:443"):
        verify_reachable("www.bing.com:443", max_retries=max_retries, retry_delay=0.5)

    assert mock_connect.call_count == max_retries
    assert attempts_logged(mock_log) == max_retries
    # no pointless wait after the last attempt
    assert mock_sleep.call_count == max_retries - 1


@pytest.mark.parametrize(
    "service, expected",
    [
        ("www.bing.com:443", ("www.bing.com", 443)),
        ("localhost:8080", ("localhost", 8080)),
    ],
)
def test_split_service(service, expected):
    assert split_service(service) == expected


@pytest.mark.parametrize("service", ["www.bing.com", ":443", "www.bing.com:https"])
def test_split_service_invalid(service):
    with pytest.raises(ValueError):
        split_service(service)
