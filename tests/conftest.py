import io

import pytest

from console import Console

TOKEN_URL = (
    "https://accounts.google.com/o/oauth2/iframerpc?action=issueToken"
    "&response_type=token%20id_token&login_hint=abc&client_id=733249279899"
)
SIGNAL_URL = "https://accounts.google.com/o/oauth2/iframe#origin=https%3A%2F%2Fhome.nest.com"


class FakeResponse:
    """Stands in for a Playwright Response."""

    def __init__(self, url, body="{}", error=None):
        self.url = url
        self.body = body
        self.error = error
        self.reads = 0

    def text(self):
        self.reads += 1
        if self.error:
            raise self.error
        return self.body


class FakePage:
    """
    Stands in for a Playwright Page.

    `schedule` maps a tick number to the URLs whose responses arrive during
    that tick; tick 0 is delivered while navigating, tick N during the Nth
    call to wait_for_timeout().
    """

    def __init__(self, schedule=None, events=None, goto_error=None):
        self.schedule = schedule or {}
        self.events = events if events is not None else []
        self.goto_error = goto_error
        self.handlers = {}
        self.waits = []
        self.visited = []

    def on(self, event, handler):
        self.handlers.setdefault(event, []).append(handler)

    def _emit(self, tick):
        for url in self.schedule.get(tick, []):
            self.events.append(("response", url))
            for handler in self.handlers.get("response", []):
                handler(FakeResponse(url))

    def goto(self, url, wait_until=None):
        if self.goto_error:
            raise self.goto_error
        self.visited.append((url, wait_until))
        self._emit(0)

    def wait_for_timeout(self, timeout):
        self.waits.append(timeout)
        self._emit(len(self.waits))


class FakeContext:
    """Stands in for a Playwright BrowserContext."""

    def __init__(self, cookies=None, events=None):
        self._cookies = cookies or []
        self.events = events if events is not None else []

    def cookies(self):
        self.events.append(("cookies",))
        return list(self._cookies)


def google_cookie(name, value, domain="accounts.google.com"):
    return {"name": name, "value": value, "domain": domain, "path": "/"}


@pytest.fixture
def console():
    return Console(verbose=False, out=io.StringIO(), err=io.StringIO())


@pytest.fixture
def verbose_console():
    return Console(verbose=True, out=io.StringIO(), err=io.StringIO())
