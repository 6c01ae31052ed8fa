from __future__ import annotations

import logging
import sys

_DEFAULT_FORMAT = "codegauge: %(message)s"
_VERBOSE_FORMAT = "codegauge [%(levelname)s] %(name)s: %(message)s"


def log_level(*, verbose: bool, quiet: bool) -> int:
    # --verbose wins when both are set programmatically; the CLI rejects the combination.
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(*, verbose: bool, quiet: bool) -> None:
    """
    Route log records to stderr at INFO (DEBUG with --verbose, WARNING with --quiet).

    stdout is reserved for reports so `--format json` output stays parseable.
    """

    fmt = _VERBOSE_FORMAT if verbose else _DEFAULT_FORMAT
    logging.basicConfig(level=log_level(verbose=verbose, quiet=quiet), format=fmt, stream=sys.stderr, force=True)
