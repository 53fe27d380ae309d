#!/usr/bin/env python3
"""
Nest Credential Extractor - Capture Nest issue token and Google cookies

Opens an interactive browser window at home.nest.com for a manual Google
sign-in, watches the network traffic for the token-issuance call, then saves
the issue token URL and Google session cookies to a JSON file.

License: MIT
"""
# Import argparse for command-line argument parsing
import argparse
# Import sys for the process exit status
import sys
# Import Playwright synchronous API for browser automation
from playwright.sync_api import sync_playwright

# Import the response observer, wait loop and cookie harvester
from capture import (
    MAX_WAIT_SECONDS,
    CaptureState,
    ResponseObserver,
    harvest_cookies,
    wait_for_token,
)
# Import the verbosity-gated status output
from console import Console
# Import the credentials file writer and result reporting
from credentials import OUTPUT_FILE, finalize

# Page where the Google sign-in starts
NEST_URL = "https://home.nest.com"
# Desktop Chrome user agent presented to Google
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
VIEWPORT = {"width": 1280, "height": 720}
LAUNCH_ARGS = [
    # Hide the navigator.webdriver automation flag from the sign-in page
    "--disable-blink-features=AutomationControlled",
    # Allow the third-party cookies Google sets inside the Nest iframe
    "--disable-features=SameSiteByDefaultCookies,CookiesWithoutSameSiteMustBeSecure",
]

INSTRUCTIONS = """
⏸️  PLEASE COMPLETE THE FOLLOWING STEPS:
   1. Click "Sign in with Google"
   2. Enter your Google credentials
   3. Complete any 2FA if required
   4. Wait for the Nest dashboard to load
   5. DO NOT log out

   The script will automatically detect and extract the credentials.
   Press Ctrl+C when you see "✅ SUCCESS" message below.
"""


def parse_args(argv=None):
    """Parse command-line arguments."""
    ap = argparse.ArgumentParser(description="Capture Nest issue token and Google cookies")
    ap.add_argument('--verbose', '-v', action='store_true', help='Show detailed status output')
    ap.add_argument('--output', '-o', default=OUTPUT_FILE, help='Save credentials to this file')
    ap.add_argument('--timeout', type=int, default=MAX_WAIT_SECONDS,
                    help='Seconds to wait for sign-in to complete')
    ap.add_argument('--url', default=NEST_URL, help='Page to open for sign-in')
    return ap.parse_args(argv)


def launch_browser(p):
    """
    Launch a visible Chromium browser configured for the Google sign-in.

    Args:
        p (Playwright): Running Playwright instance

    Returns:
        Browser: The launched browser
    """
    # Non-headless so the user can interact with the sign-in flow
    return p.chromium.launch(headless=False, args=LAUNCH_ARGS)


def open_session(browser):
    """
    Create the network-observable context and page the capture runs in.

    Args:
        browser (Browser): Browser from launch_browser()

    Returns:
        tuple: (context, page)
    """
    # Present a regular desktop Chrome to the sign-in pages
    context = browser.new_context(
        user_agent=USER_AGENT,
        viewport=VIEWPORT,
        accept_downloads=True,
    )
    # Create a new page (tab) within the browser context
    page = context.new_page()
    return context, page


def page_sleeper(page):
    """Return a wait(seconds) callable that keeps browser events flowing."""
    def wait(seconds):
        # Playwright keeps dispatching events while this waits
        page.wait_for_timeout(seconds * 1000)
    return wait


def extract_credentials(context, page, console, output=OUTPUT_FILE, url=NEST_URL, timeout=MAX_WAIT_SECONDS):
    """
    Run one capture: watch traffic, wait for sign-in, harvest cookies, save.

    Args:
        context (BrowserContext): Playwright context the page belongs to
        page (Page): Page to drive
        console (Console): Status output sink
        output (str): Credentials file path
        url (str): Page to open for sign-in
        timeout (int): Seconds to wait for the issue token

    Returns:
        bool: True if credentials were captured and saved
    """
    # Captured values for this run, shared with the response observer
    state = CaptureState()
    wait = page_sleeper(page)

    # Watch every response before any navigation happens
    console.log("📡 Setting up network monitoring...")
    page.on("response", ResponseObserver(state, console))

    # Open the sign-in page and wait for it to settle
    console.log(f"🌐 Navigating to {url}...", always=True)
    page.goto(url, wait_until="networkidle")
    console.log(INSTRUCTIONS, always=True)

    # Give the user time to sign in while polling for the token
    wait_for_token(state, wait, console, timeout=timeout)

    # Cookies are only meaningful once the token call has happened
    if state.issue_token is not None:
        state.cookies = harvest_cookies(context, console)

    # Save and report, or report failure
    return finalize(state, console, wait, path=output)


def run(args, console=None):
    """
    Start Playwright, run the capture and always close the browser.

    Any failure to start Playwright, launch the browser, open the session or
    navigate is reported as an error instead of propagating.

    Args:
        args (Namespace): Parsed command-line arguments
        console (Console): Status output sink (built from args when omitted)

    Returns:
        bool: True on success
    """
    console = console or Console(verbose=args.verbose)
    console.log("🚀 Starting Nest authentication credential extractor...\n", always=True)

    try:
        # Starting Playwright itself can fail (missing driver, running event loop)
        with sync_playwright() as p:
            browser = launch_browser(p)
            try:
                context, page = open_session(browser)
                return extract_credentials(context, page, console,
                                           output=args.output, url=args.url, timeout=args.timeout)
            finally:
                # Close the browser on every path once it has been launched
                browser.close()
    except Exception as e:
        # Launch and navigation errors end the run without writing anything
        console.error(e)
        return False


def main(argv=None):
    """
    Command-line entry point.

    Returns:
        int: Process exit status, 0 when the credentials file was written
    """
    args = parse_args(argv)
    try:
        return 0 if run(args) else 1
    except KeyboardInterrupt:
        # Ctrl+C before success leaves nothing saved
        print("\n⏹️  Interrupted, no credentials saved.")
        return 1


# Entry point: execute this block only when script is run directly (not when imported)
if __name__ == '__main__':
    sys.exit(main())
