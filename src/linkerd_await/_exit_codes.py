"""Exit codes for linkerd-await.

Codes are taken from sysexits(3) so they stay clear of the small codes
commonly used by the wrapped program:
    0   - Proxy became ready and no command was given
    64  - Invalid command-line usage
    69  - Proxy did not become ready
    71  - Command could not be launched
    128+N - Command was killed by signal N

In every other case the wrapped command's own exit code is propagated.
"""

EXIT_SUCCESS: int = 0
"""Proxy became ready and there was nothing else to run."""

EXIT_USAGE: int = 64
"""Invalid arguments, such as an unparseable duration."""

EXIT_UNAVAILABLE: int = 69
"""The proxy did not become ready within the timeout."""

EXIT_OSERR: int = 71
"""The command could not be located or executed."""

EXIT_SIGNAL_BASE: int = 128
"""Added to the signal number when the command is killed by a signal."""
