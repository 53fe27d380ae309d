"""
Capture - Observe browser network traffic for the Nest issue token

Watches every response flowing through a Playwright page, records the URL of
the Google `iframerpc` call that issues the Nest token, polls for it while the
user signs in, then collects the Google session cookies.

License: MIT
"""
# Import namedtuple for lightweight per-event observation records
from collections import namedtuple
# Import Enum to name the possible outcomes of observing a response
from enum import Enum

# URL fragments identifying the token-issuance call (both must be present)
TOKEN_URL_MARKERS = ("iframerpc", "issueToken")
# URL fragment identifying the OAuth iframe call that precedes the token
AUTH_SIGNAL_MARKER = "oauth2/iframe"
# Cookies whose domain contains this substring belong to the Google account
COOKIE_DOMAIN = "google.com"

# Seconds between checks for the issue token
POLL_INTERVAL_SECONDS = 5
# Maximum seconds to wait for the user to finish signing in
MAX_WAIT_SECONDS = 5 * 60
# Number of response body characters shown in verbose mode
PREVIEW_LENGTH = 150


class Outcome(Enum):
    """What happened when a single response was observed."""
    IGNORED = "ignored"
    TOKEN_CAPTURED = "token_captured"
    DUPLICATE_TOKEN = "duplicate_token"
    AUTH_SIGNAL = "auth_signal"
    READ_FAILED = "read_failed"


# One observed response: its outcome, URL, optional body preview and read error
Observation = namedtuple("Observation", ["outcome", "url", "preview", "error"])


class CaptureState:
    """
    Values captured during one extraction run.

    The response observer is the only writer of `issue_token` and
    `auth_signal_seen`; the wait loop only reads them.
    """

    def __init__(self):
        self.issue_token = None
        self.cookies = None
        self.auth_signal_seen = False

    def has_credentials(self):
        """True when both the issue token and a non-empty cookie string exist."""
        return bool(self.issue_token) and bool(self.cookies)


def is_token_url(url):
    """
    Check if a URL is the token-issuance call.

    Args:
        url (str): Response URL

    Returns:
        bool: True if the URL contains every token marker
    """
    return all(marker in url for marker in TOKEN_URL_MARKERS)


def is_auth_signal_url(url):
    """Check if a URL is the OAuth iframe call signalling sign-in progress."""
    return AUTH_SIGNAL_MARKER in url


def read_response_text(response):
    """Read a Playwright response body as text."""
    return response.text()


class ResponseObserver:
    """
    Response event handler for `page.on("response", ...)`.

    Each call returns an Observation so callers and tests can see exactly how
    the response was treated. Failures reading a body are reported as
    READ_FAILED and never propagate into Playwright's event dispatch.

    Args:
        state (CaptureState): Where captured values are stored
        console (Console): Status output sink
        read_body (callable): Reads a response body (defaults to response.text())
    """

    def __init__(self, state, console, read_body=read_response_text):
        # Shared capture state; this observer is its only writer
        self.state = state
        # Status output sink for detection messages
        self.console = console
        # Body reader, swappable so read failures can be simulated
        self.read_body = read_body

    def __call__(self, response):
        # Playwright passes the Response object; classify it by URL
        return self.observe(response.url, response)

    def observe(self, url, response):
        """
        Classify one response and record any captured value.

        Args:
            url (str): Response URL
            response (Response): Playwright response, used only to read the body

        Returns:
            Observation: How the response was treated
        """
        # Assume the response is unrelated until a marker matches
        outcome = Outcome.IGNORED
        # Body preview and read error stay None unless a body is read
        preview = None
        error = None

        # Check whether this is the token-issuance call
        if is_token_url(url):
            if self.state.issue_token is not None:
                # First match wins; later token calls are ignored
                outcome = Outcome.DUPLICATE_TOKEN
            else:
                # Announce the detection in verbose mode
                self.console.log("✅ Found iframerpc call with issueToken!")
                # The full URL is the credential, so record it before touching the body
                self.state.issue_token = url
                outcome = Outcome.TOKEN_CAPTURED
                # Only verbose mode shows the body, so only read it then
                if self.console.verbose:
                    try:
                        # Keep the first characters of the body for display
                        preview = self.read_body(response)[:PREVIEW_LENGTH]
                        self.console.log(f"   Response preview: {preview}...\n")
                    except Exception as e:
                        # Body already consumed, connection aborted, page closed...
                        error = str(e)
                        outcome = Outcome.READ_FAILED
                        self.console.log(f"   ⚠️  Could not read response: {error}")
                # Always tell the user the token has been captured
                self.console.log("📋 Issue Token URL captured", always=True)

        # The OAuth iframe call is reported once as a sign of progress
        if is_auth_signal_url(url) and not self.state.auth_signal_seen:
            self.state.auth_signal_seen = True
            self.console.log("✅ Found oauth2/iframe call - will capture cookies after auth completes\n")
            # A token URL also matches here; keep its outcome
            if outcome is Outcome.IGNORED:
                outcome = Outcome.AUTH_SIGNAL

        # Hand back the per-event result
        return Observation(outcome, url, preview, error)


def wait_for_token(state, wait, console, timeout=MAX_WAIT_SECONDS, interval=POLL_INTERVAL_SECONDS):
    """
    Poll for the issue token while the user completes sign-in.

    Args:
        state (CaptureState): Shared capture state (read only here)
        wait (callable): Sleeps for the given number of seconds while browser
            events keep being delivered
        console (Console): Status output sink
        timeout (int): Ceiling on total wait time in seconds
        interval (int): Seconds between checks

    Returns:
        int: Seconds spent waiting
    """
    # Seconds waited so far
    elapsed = 0
    # Checked before every wait, so an early capture skips waiting entirely
    while state.issue_token is None and elapsed < timeout:
        # Sleep one interval; response events are delivered meanwhile
        wait(interval)
        elapsed += interval
        # Show a dot or an elapsed-time line for this tick
        console.progress(elapsed)

    # Finish the line of dots if any were written
    if elapsed > 0:
        console.end_progress()
    return elapsed


def filter_cookies(cookies, domain=COOKIE_DOMAIN):
    """
    Keep cookies whose domain contains `domain`, preserving enumeration order.

    Args:
        cookies (list): Cookie dictionaries as returned by context.cookies()
        domain (str): Domain substring to match

    Returns:
        list: Matching cookie dictionaries
    """
    return [c for c in cookies if domain in c.get("domain", "")]


def cookie_header(cookies):
    """Join cookies into a `name=value; name=value` header string."""
    return "; ".join(f"{c['name']}={c['value']}" for c in cookies)


def harvest_cookies(context, console, domain=COOKIE_DOMAIN):
    """
    Read the browser context's cookies once and build the account cookie string.

    Args:
        context (BrowserContext): Playwright browser context
        console (Console): Status output sink
        domain (str): Domain substring identifying account cookies

    Returns:
        str or None: Cookie header string, or None when no cookie matched
    """
    console.log("🍪 Capturing cookies from browser context...")
    # Enumerate the context cookies once and keep the account ones
    matching = filter_cookies(context.cookies(), domain)
    # Build the `name=value; ...` header in enumeration order
    header = cookie_header(matching)

    # An empty string is treated as nothing captured
    if not header:
        console.log("⚠️  No Google cookies found")
        return None

    # Report how much was captured
    console.log(f"✅ Captured {len(matching)} Google cookies")
    console.log(f"   Total cookie string length: {len(header)} characters")
    return header
