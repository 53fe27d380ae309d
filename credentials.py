"""
Credentials - Build, save and load the captured Nest credentials file

License: MIT
"""
# Import json for writing and reading the credentials file
import json
# Import datetime utilities for the UTC capture timestamp
from datetime import datetime, timezone

# Default output file, written to the working directory
OUTPUT_FILE = "nest-credentials.json"
# Advisory stored alongside the credentials
NOTE = "Do not log out of home.nest.com as this will invalidate these credentials"
# Seconds the browser stays open after success so the user can see the result
SUCCESS_HOLD_SECONDS = 10
# Number of cookie string characters shown in verbose mode
COOKIE_PREVIEW_LENGTH = 100


def utc_timestamp(now=None):
    """
    Format a time as ISO-8601 UTC with milliseconds and a `Z` suffix.

    Args:
        now (datetime): Time to format (defaults to the current UTC time)

    Returns:
        str: Timestamp such as 2024-01-31T12:00:00.000Z
    """
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def build_record(issue_token, cookies, now=None):
    """Build the credentials record persisted to disk."""
    return {
        "issue_token": issue_token,
        "cookies": cookies,
        "captured_at": utc_timestamp(now),
        "note": NOTE,
    }


def write_credentials(record, path=OUTPUT_FILE):
    """
    Save a credentials record as indented JSON, replacing any existing file.

    Args:
        record (dict): Credentials record from build_record()
        path (str): Output file path
    """
    with open(path, "w", encoding="utf-8") as f:
        json.dump(record, f, indent=2)


def load_credentials(path=OUTPUT_FILE):
    """Read a credentials file written by write_credentials()."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def finalize(state, console, hold, path=OUTPUT_FILE):
    """
    Save the credentials if the run captured both values, and report the result.

    Args:
        state (CaptureState): Values captured during the run
        console (Console): Status output sink
        hold (callable): Waits the given number of seconds with the browser open
        path (str): Output file path

    Returns:
        bool: True if the credentials file was written
    """
    # A partial capture (no token, or no cookies) is never saved
    if not state.has_credentials():
        console.log("\n❌ Failed to capture credentials within the time limit.", always=True)
        console.log("Please try again and ensure you complete the authentication process.", always=True)
        return False

    console.log("\n🎉 ✅ SUCCESS! Credentials captured!\n", always=True)

    # Build the record with the current UTC time and write it out
    record = build_record(state.issue_token, state.cookies)
    write_credentials(record, path)
    console.log(f"📁 Credentials saved to: {path}", always=True)

    # Full values are only dumped in verbose mode
    console.log("\n📋 ISSUE_TOKEN:")
    console.log(state.issue_token)
    console.log("\n🍪 COOKIES:")
    console.log(state.cookies[:COOKIE_PREVIEW_LENGTH] + "...")

    console.log("\n⚠️  IMPORTANT: Do not log out of home.nest.com!", always=True)
    console.log("⚠️  These credentials will be invalidated if you log out.\n", always=True)

    # Keep the browser up briefly so the user can see the result
    console.log(f"Browser will close in {SUCCESS_HOLD_SECONDS} seconds...", always=True)
    try:
        hold(SUCCESS_HOLD_SECONDS)
    except KeyboardInterrupt:
        # Ctrl+C here only cuts the wait short; the file is already saved
        console.log("Closing browser now...", always=True)
    return True
