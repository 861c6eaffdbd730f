import atexit
import logging
import os
import re
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Dict

from dotenv import load_dotenv
from slack_bolt import Ack, App, Respond
from slack_sdk import WebClient

from comment_pulse.comment_store import ThreadSafeCommentStore
from comment_pulse.slack_bot.handlers import (
    handle_export_button_click,
    process_comments_command,
    process_shared_file,
)
from comment_pulse.slack_bot.views import EXPORT_ACTION_PREFIX

# Load environment variables from .env file
load_dotenv()

COMMENTS_COMMAND = os.getenv("COMMENTS_COMMAND", "/comments")

# Set up logging
logging_level = os.environ.get("LOG_LEVEL", "INFO")
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging_level
)
logger = logging.getLogger(__name__)

# Determine if token verification should be disabled (useful for CI/test mode)
_token_verification_enabled_env = os.getenv(
    "SLACK_BOLT_TOKEN_VERIFICATION_ENABLED", "true"
).lower()
# Treat any value other than explicit "false" (case-insensitive) as truthy
_token_verification_enabled = _token_verification_enabled_env != "false"

app = App(
    token=os.environ.get("SLACK_BOT_TOKEN"),
    process_before_response=True,
    token_verification_enabled=_token_verification_enabled,
)

# Comments and last analysis per channel, in memory only
comment_store = ThreadSafeCommentStore()

# Initialize a single thread pool for the application
executor = ThreadPoolExecutor(max_workers=10)


def shutdown_executor():
    """Gracefully shut down the thread pool executor."""
    logger.info("Shutting down thread pool executor...")
    executor.shutdown(wait=True)
    logger.info("Thread pool executor shut down gracefully.")


# Register the shutdown function to be called on exit
atexit.register(shutdown_executor)


# ------------------------------------------------------------------
# Thread helper utilities
# ------------------------------------------------------------------


def _log_future_exception(fut: Future) -> None:  # noqa: WPS430 – small util
    """Logs any exception raised by a completed *Future*."""
    exc = fut.exception()
    if exc is not None:
        logger.exception("Background task raised an exception: %s", exc, exc_info=exc)


def submit_background(func, /, *args, **kwargs) -> Future:  # noqa: WPS110
    """Submit *func* to the shared thread pool with automatic error logging."""

    fut = executor.submit(func, *args, **kwargs)
    fut.add_done_callback(_log_future_exception)
    return fut


# Log all incoming messages to help with debugging
@app.middleware
def log_request(logger, body, next):
    logger.debug(f"Received event: {body}")
    return next()


@app.command(COMMENTS_COMMAND)
def handle_comments_command(
    ack: Ack,
    command: Dict[str, Any],
    client: WebClient,
    logger: logging.Logger,
    respond: Respond,
):
    """Acknowledge the comments command and process it on the thread pool."""
    ack()
    try:
        submit_background(
            process_comments_command,
            command=command,
            client=client,
            logger=logger,
            respond=respond,
            store=comment_store,
            command_name=COMMENTS_COMMAND,
        )
        logger.info(
            f"Submitted {COMMENTS_COMMAND} request for user '{command['user_id']}' to thread pool."
        )
    except Exception as e:
        logger.error(
            f"Error submitting {COMMENTS_COMMAND} for user '{command.get('user_id')}' to thread pool: {e}",
            exc_info=True,
        )
        respond("Sorry, there was an issue submitting your request. Please try again.")


@app.action(re.compile(f"^{EXPORT_ACTION_PREFIX}"))
def export_button_click_wrapper(ack, body, client, logger):  # noqa: WPS110 – slack signature
    handle_export_button_click(
        ack=ack,
        body=body,
        client=client,
        logger=logger,
        store=comment_store,
        command_name=COMMENTS_COMMAND,
    )


@app.event("file_shared")
def handle_file_shared(event: Dict[str, Any], client: WebClient, logger: logging.Logger):
    """Load comments from a shared .csv or .txt file on the thread pool."""
    submit_background(
        process_shared_file,
        event=event,
        client=client,
        logger=logger,
        store=comment_store,
    )


# Error handler
@app.error
def custom_error_handler(error, body, logger):
    logger.exception(f"Error handling request: {error}")
    logger.debug(f"Request body: {body}")


# NOTE: Runtime startup lives in comment_pulse/main.py to keep this module import-safe.
