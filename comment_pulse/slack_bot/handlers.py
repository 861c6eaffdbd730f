import json
import logging
from typing import Any, Callable, Dict, Optional, Tuple

import requests
from slack_bolt import Ack
from slack_sdk.errors import SlackApiError
from slack_sdk.web import WebClient

from comment_pulse import config
from comment_pulse.analysis.classifier import Classifier
from comment_pulse.comment_store import ThreadSafeCommentStore
from comment_pulse.exceptions import IngestionError, UnsupportedExportFormatError
from comment_pulse.ingestion import is_supported_filename, load_file, parse_pasted_text
from comment_pulse.reporting.aggregator import analyze_batch
from comment_pulse.reporting.export import MIME_TYPES, export_batch, generate_filename, normalize_format
from comment_pulse.reporting.render import post_report_to_slack
from comment_pulse.slack_bot.views import (
    build_dashboard_blocks,
    format_comment_list,
    help_text,
)

logger = logging.getLogger(__name__)

NO_ANALYSIS_MESSAGE = "No analysis available yet. Run `{command} analyze` first."


def split_subcommand(text: str) -> Tuple[str, str]:
    """Split command text into ``(subcommand, remainder)``.

    The remainder keeps its line breaks so pasted multi-line comments survive.
    """
    stripped = (text or "").strip()
    if not stripped:
        return "help", ""
    parts = stripped.split(None, 1)
    sub = parts[0].lower()
    rest = parts[1] if len(parts) > 1 else ""
    return sub, rest


def upload_export(
    client: WebClient, channel_id: str, batch, fmt: str, *, thread_ts: Optional[str] = None
) -> str:
    """Export *batch* as *fmt* and upload it to *channel_id*. Returns the filename."""
    key = normalize_format(fmt)
    filename = generate_filename(key)
    client.files_upload_v2(
        channel=channel_id,
        title=f"Sentiment analysis export ({key.upper()})",
        content=export_batch(batch, key),
        filename=filename,
        thread_ts=thread_ts,
    )
    logger.info(
        "report_exported",
        extra={"channel_id": channel_id, "export_format": key, "mime_type": MIME_TYPES[key]},
    )
    return filename


def process_comments_command(  # noqa: C901 – flat sub-command dispatch
    command: Dict[str, Any],
    client: WebClient,
    logger: logging.Logger,
    respond: Callable[..., Any],
    store: ThreadSafeCommentStore,
    command_name: str,
    classifier: Optional[Classifier] = None,
) -> None:
    """Run one comments sub-command. Executed on the background thread pool."""
    channel_id = command.get("channel_id") or command.get("user_id")
    sub, rest = split_subcommand(command.get("text", ""))
    logger.info(
        f"Processing {command_name} '{sub}' from user '{command.get('user_id')}' in '{channel_id}'"
    )

    try:
        if sub == "add":
            comments = parse_pasted_text(rest)
            if not comments:
                respond(f"Nothing to add. Usage: `{command_name} add <comment text>`")
                return
            try:
                total = store.add_comments(channel_id, comments)
            except ValueError as exc:
                respond(f"Could not add comments: {exc}")
                return
            respond(f"Added {len(comments)} comment(s). {total} comment(s) loaded.")

        elif sub == "remove":
            comment_id = rest.strip()
            if not comment_id:
                respond(f"Usage: `{command_name} remove <comment id>`")
                return
            removed = store.remove_comment(channel_id, comment_id)
            if removed is None:
                respond(f"No comment with ID `{comment_id}` is loaded.")
            else:
                respond(f"Removed comment `{comment_id}`.")

        elif sub == "clear":
            removed_count = store.clear(channel_id)
            respond(f"Cleared {removed_count} comment(s).")

        elif sub == "list":
            respond(format_comment_list(store.get_comments(channel_id)))

        elif sub == "analyze":
            comments = store.get_comments(channel_id)
            if not comments:
                respond(f"No comments loaded yet. Add some with `{command_name} add <text>`.")
                return
            batch = analyze_batch(comments, classifier=classifier)
            store.set_analysis(channel_id, batch)
            dashboard = client.chat_postMessage(
                channel=channel_id,
                text=f"Sentiment analysis of {batch.summary.total} comment(s)",
                blocks=build_dashboard_blocks(batch),
            )
            post_report_to_slack(
                batch=batch, client=client, channel=channel_id, thread_ts=dashboard.get("ts")
            )

        elif sub == "export":
            batch = store.get_analysis(channel_id)
            if batch is None:
                respond(NO_ANALYSIS_MESSAGE.format(command=command_name))
                return
            try:
                filename = upload_export(client, channel_id, batch, rest.strip() or "md")
            except UnsupportedExportFormatError as exc:
                respond(str(exc))
                return
            respond(f"Uploaded `{filename}`.")

        else:
            respond(help_text(command_name))

    except SlackApiError as exc:
        logger.error(
            f"Slack API error while processing {command_name} '{sub}': {exc.response.get('error')}",
            exc_info=True,
        )
        respond("Sorry, Slack rejected the request. Please try again.")
    except Exception as exc:
        logger.error(
            f"Error processing {command_name} '{sub}' for user '{command.get('user_id', 'unknown')}': {exc}",
            exc_info=True,
        )
        respond("Sorry, an unexpected error occurred while processing your request. Please try again.")


def handle_export_button_click(
    ack: Ack,
    body: Dict[str, Any],
    client: WebClient,
    logger: logging.Logger,
    store: ThreadSafeCommentStore,
    command_name: str,
) -> None:
    """Handle a dashboard export button: upload the last analysis in the chosen format."""
    ack()  # acknowledge action early to avoid client timeouts

    try:
        user_id = body["user"]["id"]
        channel_id = body["channel"]["id"]
        action = body.get("actions", [{}])[0]
        try:
            fmt = json.loads(action.get("value", "{}")).get("format")
        except (ValueError, AttributeError):
            fmt = None

        if not fmt:
            logger.warning("Export button missing format payload – body=%s", body)
            client.chat_postEphemeral(
                channel=channel_id, user=user_id, text="Sorry, this export button is mis-configured."
            )
            return

        batch = store.get_analysis(channel_id)
        if batch is None:
            client.chat_postEphemeral(
                channel=channel_id,
                user=user_id,
                text=NO_ANALYSIS_MESSAGE.format(command=command_name),
            )
            return

        thread_ts = body.get("message", {}).get("ts")
        try:
            upload_export(client, channel_id, batch, fmt, thread_ts=thread_ts)
        except UnsupportedExportFormatError as exc:
            logger.warning("Export rejected: %s", exc)
            client.chat_postEphemeral(channel=channel_id, user=user_id, text=str(exc))

    except Exception as exc:  # pragma: no cover – catch-all to protect app thread
        logger.error("Error handling export button click: %s", exc, exc_info=True)


def download_shared_file(client: WebClient, file_info: Dict[str, Any]) -> bytes:
    """Download a private Slack file using the bot token of *client*."""
    url = file_info.get("url_private_download") or file_info.get("url_private")
    if not url:
        raise IngestionError(f"File '{file_info.get('name')}' has no download URL.")
    response = requests.get(
        url,
        headers={"Authorization": f"Bearer {client.token}"},
        timeout=config.FILE_DOWNLOAD_TIMEOUT_SECONDS,
    )
    response.raise_for_status()
    return response.content


def process_shared_file(
    event: Dict[str, Any],
    client: WebClient,
    logger: logging.Logger,
    store: ThreadSafeCommentStore,
) -> None:
    """Load comments from a ``.csv`` / ``.txt`` file shared in a channel.

    Other file types are ignored. Problems are reported to the sharing user
    with an ephemeral message.
    """
    channel_id = event.get("channel_id")
    user_id = event.get("user_id")
    file_id = event.get("file_id") or event.get("file", {}).get("id")
    if not channel_id or not file_id:
        logger.debug("Ignoring file_shared event without channel or file: %s", event)
        return

    def _tell(text: str) -> None:
        client.chat_postEphemeral(channel=channel_id, user=user_id, text=text)

    try:
        file_info = client.files_info(file=file_id)["file"]
        filename = file_info.get("name") or file_id
        if not is_supported_filename(filename):
            logger.debug("Ignoring shared file %s (unsupported type)", filename)
            return

        comments = load_file(filename, download_shared_file(client, file_info))
        if not comments:
            _tell(f"No comments found in `{filename}`.")
            return
        total = store.add_comments(channel_id, comments)
        _tell(f"Added {len(comments)} comment(s) from `{filename}`. {total} comment(s) loaded.")

    except ValueError as exc:
        # IngestionError and store limit / duplicate errors
        logger.warning("Could not load shared file %s: %s", file_id, exc)
        _tell(f"Could not load comments: {exc}")
    except requests.RequestException as exc:
        logger.error("Download of shared file %s failed: %s", file_id, exc, exc_info=True)
        _tell("Sorry, the file could not be downloaded. Please try again.")
    except SlackApiError as exc:
        logger.error(
            f"Slack API error while loading file '{file_id}': {exc.response.get('error')}",
            exc_info=True,
        )
