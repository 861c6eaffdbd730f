import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from comment_pulse import config
from comment_pulse.reporting.models import BatchAnalysis, Comment


@dataclass
class Workspace:
    """Comments collected in one place (e.g. a Slack channel) plus the last analysis."""

    workspace_id: str
    comments: List[Comment] = field(default_factory=list)
    analysis: Optional[BatchAnalysis] = None


class ThreadSafeCommentStore:
    """A thread-safe, in-memory store of comment workspaces.

    Nothing is persisted; a workspace lives until it is cleared or the
    process exits.
    """

    def __init__(self, max_comments: Optional[int] = None):
        """Create a new :class:`ThreadSafeCommentStore`.

        Args:
            max_comments: Optional maximum number of comments per workspace.
                :pydata:`None` (default) uses ``MAX_COMMENTS_PER_WORKSPACE``;
                values ``<= 0`` mean unlimited.
        """
        self._workspaces: Dict[str, Workspace] = {}
        self._lock = threading.Lock()
        limit = config.MAX_COMMENTS_PER_WORKSPACE if max_comments is None else max_comments
        self._max_comments = limit if limit > 0 else None
        self._logger = logging.getLogger(__name__)

    def _modify(
        self, workspace_id: str, modifier: Callable[[Workspace], None]
    ) -> Workspace:
        """Apply *modifier* to the (possibly new) workspace inside the lock."""
        with self._lock:
            workspace = self._workspaces.get(workspace_id)
            if workspace is None:
                workspace = Workspace(workspace_id=workspace_id)
                self._workspaces[workspace_id] = workspace
            modifier(workspace)
            return workspace

    def add_comments(self, workspace_id: str, comments: Iterable[Comment]) -> int:
        """Append *comments* and return the new comment count.

        Any previous analysis is dropped since it no longer matches the
        comments. Raises ValueError if an id is already present or the
        workspace limit would be exceeded; in that case nothing changes.
        """
        new = list(comments)

        def _apply(workspace: Workspace) -> None:
            existing = {c.id for c in workspace.comments}
            for comment in new:
                if comment.id in existing:
                    raise ValueError(f"Comment with ID {comment.id} already exists.")
                existing.add(comment.id)
            if (
                self._max_comments is not None
                and len(workspace.comments) + len(new) > self._max_comments
            ):
                raise ValueError(
                    f"Workspace limit of {self._max_comments} comments reached. "
                    "Clear or remove comments first."
                )
            workspace.comments.extend(new)
            workspace.analysis = None

        workspace = self._modify(workspace_id, _apply)
        self._logger.info(
            "comments_added",
            extra={"workspace_id": workspace_id, "added": len(new)},
        )
        return len(workspace.comments)

    def remove_comment(self, workspace_id: str, comment_id: str) -> Optional[Comment]:
        """Remove a comment by its ID and drop the stale analysis.

        Returns the removed comment or None if not found.
        """
        with self._lock:
            workspace = self._workspaces.get(workspace_id)
            if workspace is None:
                return None
            for idx, comment in enumerate(workspace.comments):
                if comment.id == comment_id:
                    workspace.analysis = None
                    return workspace.comments.pop(idx)
            return None

    def clear(self, workspace_id: str) -> int:
        """Drop every comment and the last analysis. Returns the number removed."""
        with self._lock:
            workspace = self._workspaces.pop(workspace_id, None)
        removed = len(workspace.comments) if workspace else 0
        self._logger.info(
            "comments_cleared",
            extra={"workspace_id": workspace_id, "removed": removed},
        )
        return removed

    def get_comments(self, workspace_id: str) -> List[Comment]:
        """Returns a copy of the workspace's comments in insertion order."""
        with self._lock:
            workspace = self._workspaces.get(workspace_id)
            return list(workspace.comments) if workspace else []

    def set_analysis(self, workspace_id: str, analysis: BatchAnalysis) -> None:
        def _apply(workspace: Workspace) -> None:
            workspace.analysis = analysis

        self._modify(workspace_id, _apply)

    def get_analysis(self, workspace_id: str) -> Optional[BatchAnalysis]:
        """Return the last analysis for the workspace, or None if never analyzed."""
        with self._lock:
            workspace = self._workspaces.get(workspace_id)
            return workspace.analysis if workspace else None

    def count(self, workspace_id: Optional[str] = None) -> int:
        """Number of comments in *workspace_id*, or of workspaces when omitted."""
        with self._lock:
            if workspace_id is None:
                return len(self._workspaces)
            workspace = self._workspaces.get(workspace_id)
            return len(workspace.comments) if workspace else 0
