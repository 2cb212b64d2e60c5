"""
notifier.py - Tell the personal website whether the stream is live.
"""

import logging

import requests

_log = logging.getLogger("streaming.notifier")


class NotificationError(Exception):
    """The live-status webhook did not accept the update."""
    pass


def notify_live(live: bool, url: str, token: str | None, timeout: float = 10.0) -> None:
    """
    POST {"live": live} to the status endpoint.

    The endpoint answers 204 No Content on success.

    Raises:
        NotificationError: On a missing token, transport error or any other status
    """
    if not token:
        raise NotificationError("no API token configured for the live-status webhook")

    try:
        resp = requests.post(
            url,
            json={"live": live},
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {token}",
            },
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise NotificationError(f"could not send request: {e}") from e

    if resp.status_code != requests.codes.no_content:
        raise NotificationError(f"invalid status code: {resp.status_code}")

    _log.info("Live status set to %s", live)
