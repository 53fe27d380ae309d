"""
Console - Verbosity-gated status output for the credential extractor

License: MIT
"""
# Import sys for direct stdout/stderr writes (progress dots, errors)
import sys


class Console:
    """
    Print status messages, hiding detail lines unless verbose mode is on.

    Args:
        verbose (bool): Show detailed status lines when True
        out (file): Stream for normal output (defaults to sys.stdout)
        err (file): Stream for error output (defaults to sys.stderr)
    """

    def __init__(self, verbose=False, out=None, err=None):
        self.verbose = verbose
        self.out = out or sys.stdout
        self.err = err or sys.stderr

    def log(self, message="", always=False):
        """Print a message in verbose mode, or always when `always` is set."""
        if self.verbose or always:
            print(message, file=self.out)

    def progress(self, elapsed):
        """
        Report one tick of the wait loop.

        Verbose mode prints a line with the elapsed time; terse mode writes a
        single dot on the current line.
        """
        if self.verbose:
            print(f"⏳ Waiting for authentication... ({int(elapsed)}s)", file=self.out)
        else:
            self.out.write(".")
            # Dots have no newline, so flush or they sit in the buffer
            self.out.flush()

    def end_progress(self):
        """Terminate the line of progress dots (terse mode only)."""
        if not self.verbose:
            print(file=self.out)

    def error(self, message):
        print(f"❌ Error: {message}", file=self.err)
