"""
utils.py

Logging helpers shared by the world, the loaders and the CLI.

- `safe_log_exception(msg, exc, **ctx)` : logs exceptions robustly
- `configure_logging(level)` : installs the console handler once
"""

from typing import Any
import sys
import logging

logger = logging.getLogger(__name__)


def safe_log_exception(msg: str, exc: Exception, **ctx: Any) -> None:
	"""Log an exception robustly.

	Attempts to call `logger.error` with the traceback attached. If logging
	fails for any reason, falls back to writing a compact message to
	`sys.stderr`.
	"""
	try:
		if ctx:
			ctx_s = ' | '.join(f"{k}={v!r}" for k, v in ctx.items())
			logger.error('%s | %s | %s', msg, exc, ctx_s, exc_info=exc)
		else:
			logger.error('%s | %s', msg, exc, exc_info=exc)
	except Exception:
		try:
			sys.stderr.write(f'LOGGING FAILURE: {msg} {exc}\n')
		except Exception:
			pass


def configure_logging(level: int = logging.INFO) -> logging.Logger:
	"""Attach a console handler to the `robosim` logger (once) and set `level`."""
	log = logging.getLogger("robosim")
	if not log.handlers:
		h = logging.StreamHandler(sys.stdout)
		h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
		log.addHandler(h)
	for h in log.handlers:
		h.setLevel(level)
	log.setLevel(level)
	return log
