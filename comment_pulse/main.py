"""Application bootstrap for Comment Pulse.

This module starts the Slack Bolt application via Socket Mode when executed
as a script. Keeping the runtime bootstrap here (instead of in
``comment_pulse/app.py``) lets tests import the app module without
side-effects.
"""
from __future__ import annotations

import os
import sys
from contextlib import suppress

from slack_bolt.adapter.socket_mode import SocketModeHandler

from comment_pulse.app import app, logger, shutdown_executor


def main() -> None:  # pragma: no cover - manual run path
    """Start the Slack bot in Socket Mode.

    Blocks until the process receives a termination signal (e.g., Ctrl-C),
    then shuts the background executor down.
    """

    app_token = os.getenv("SLACK_APP_TOKEN")
    if not app_token:
        logger.error(
            "Environment variable SLACK_APP_TOKEN is required to start the bot."
        )
        sys.exit(1)

    logger.info("Launching SocketModeHandler…")
    handler = SocketModeHandler(app, app_token)

    try:
        logger.info("Comment Pulse is ready to receive commands via Socket Mode.")
        handler.start()  # Blocking call
    except KeyboardInterrupt:  # pragma: no cover
        logger.info("Shutdown requested (KeyboardInterrupt). Exiting…")
    finally:
        with suppress(Exception):
            shutdown_executor()
        logger.info("Goodbye.")


if __name__ == "__main__":  # pragma: no cover
    main()
