"""
Network Handler

bingsy is often started from a login or startup script, at a point where the network may not be
initialized yet. Before any request is made the Bing service is probed with a plain TCP connection,
retrying a fixed number of times with a fixed delay in between.
"""

import socket
from time import sleep

from bingsy.cli_utils.console import log


class ReachabilityError(Exception):
    """
    Raised when the service could not be reached within the configured number of attempts.
    """

    pass


def split_service(service: str) -> tuple[str, int]:
    """
    Split a "host:port" endpoint into its parts, e.g. "www.bing.com:443" -> ("www.bing.com", 443).
    """

    host, sep, port = service.rpartition(":")
    if not sep or not host:
        raise ValueError(f"service {service} is not of the form host:port")

    return host, int(port)


def verify_reachable(service: str, max_retries: int, retry_delay: float, timeout: float = 1):
    """
    Open (and immediately close) a TCP connection to service. On failure log the error, wait
    retry_delay seconds and try again. Raise ReachabilityError after max_retries failed attempts.
    """

    address = split_service(service)

    for attempt in range(1, max_retries + 1):
        try:
            connection = socket.create_connection(address, timeout=timeout)

        except OSError as error:
            log(f"attempt {attempt}/{max_retries}: server unreachable, error: {error}")

        else:
            connection.close()
            return

        if attempt < max_retries:
            log(f"retry in {retry_delay}s")
            sleep(retry_delay)

    raise ReachabilityError(f"service {service} unreachable")
