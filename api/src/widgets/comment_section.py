"""Client-side comment section for a single post.

Talks to the comment endpoints over HTTP with a Bearer token, keeps a
local list of comments, and renders the section as text lines. User
facing messages go through ``notify`` (an alert in a browser UI).
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import httpx
import structlog

from src.config import get_settings


logger = structlog.get_logger(__name__)

SORT_NEWEST = "newest"
SORT_OLDEST = "oldest"

TOKEN_MISSING = "Authentication token not found. Please log in."

_EPOCH = datetime.min.replace(tzinfo=UTC)


class CommentWidgetError(Exception):
    """Request failed with a user-facing message."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def ordinal(day: int) -> str:
    """1 -> '1st', 2 -> '2nd', 11 -> '11th', 23 -> '23rd'."""
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp from the API.

    Naive values are taken as UTC so every result compares with every other.
    """
    if isinstance(value, datetime):
        moment = value
    elif not value:
        return None
    else:
        try:
            moment = datetime.fromisoformat(str(value))
        except ValueError:
            return None
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)


def format_timestamp(value: Any) -> str:
    """Format like ``5th Mar 2025 14:03:22``."""
    moment = parse_timestamp(value)
    if moment is None:
        return ""
    return f"{ordinal(moment.day)} {moment:%b %Y %H:%M:%S}"


def comment_author_id(comment: dict[str, Any]) -> str | None:
    """Author id of a comment, populated or not."""
    author = comment.get("author")
    if isinstance(author, dict):
        author = author.get("id")
    if author is None:
        author = comment.get("author_id")
    return str(author) if author is not None else None


class CommentSection:
    """Comment widget state and actions for one post.

    Args:
        post_id: Post whose comments are shown
        auth_user: Stored login, ``{"token": ..., "id": ...}``
        client: HTTP client. Defaults to one built from settings.
        notify: Receives user-facing messages
    """

    def __init__(
        self,
        post_id: UUID | str,
        auth_user: dict[str, Any] | None = None,
        client: httpx.Client | None = None,
        notify: Callable[[str], None] | None = None,
    ):
        settings = get_settings()
        self.post_id = str(post_id)
        self.auth_user = auth_user or {}
        self._owns_client = client is None
        self.client = client or httpx.Client(
            base_url=settings.api_base_url,
            timeout=settings.api_request_timeout,
        )
        self.notify = notify or self._log_notice

        self.comments: list[dict[str, Any]] = []
        self.new_comment = ""
        self.edit_comment: dict[str, Any] | None = None
        self.hide_comments = False
        self.sort_option = SORT_NEWEST
        self.loading = False

    @staticmethod
    def _log_notice(message: str) -> None:
        logger.info("comment_widget_notice", message=message)

    def close(self) -> None:
        """Close the HTTP client if this widget created it."""
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "CommentSection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ==========================================================================
    # Auth helpers
    # ==========================================================================

    @property
    def token(self) -> str | None:
        return self.auth_user.get("token")

    @property
    def current_user_id(self) -> str | None:
        user_id = self.auth_user.get("id")
        return str(user_id) if user_id is not None else None

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def _request(
        self,
        method: str,
        url: str,
        failure_message: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        try:
            response = self.client.request(
                method, url, headers=self._headers(), json=json
            )
        except httpx.HTTPError as e:
            logger.warning("comment_widget_request_failed", url=url, error=str(e))
            raise CommentWidgetError(failure_message) from e

        if response.is_error:
            logger.warning(
                "comment_widget_request_failed",
                url=url,
                status_code=response.status_code,
            )
            raise CommentWidgetError(failure_message)

        return response.json()

    # ==========================================================================
    # Actions
    # ==========================================================================

    def fetch_comments(self) -> None:
        """Load the post's comments."""
        self.loading = True
        try:
            if not self.token:
                self.notify(TOKEN_MISSING)
                return

            data = self._request(
                "GET",
                f"/v1/comments/post/{self.post_id}",
                "Failed to get comments. Please try again.",
            )
            if isinstance(data, list):
                self.comments = data
            elif isinstance(data, dict) and isinstance(data.get("comments"), list):
                self.comments = data["comments"]
            else:
                self.comments = []
        except CommentWidgetError as e:
            self.notify(e.message)
        finally:
            self.loading = False

    def add_comment(self) -> None:
        """Post ``new_comment`` and show it at the top of the list."""
        self.loading = True
        try:
            if not self.token:
                self.notify(TOKEN_MISSING)
                return

            if not self.new_comment.strip():
                self.notify("Comment cannot be empty.")
                return

            data = self._request(
                "POST",
                f"/v1/comments/post/{self.post_id}",
                "Failed to add comment. Please try again.",
                json={"content": self.new_comment},
            )
            created = data.get("comment", data) if isinstance(data, dict) else data
            self.comments = [created, *self.comments]
        except CommentWidgetError as e:
            self.notify(e.message)
        finally:
            self.new_comment = ""
            self.loading = False

    def start_edit(self, comment: dict[str, Any]) -> None:
        """Enter edit mode with the comment's text in the input."""
        self.edit_comment = comment
        self.new_comment = comment.get("content", "")

    def cancel_edit(self) -> None:
        """Leave edit mode and clear the input."""
        self.edit_comment = None
        self.new_comment = ""

    def update_comment(self) -> None:
        """Send the edited text of the selected comment."""
        self.loading = True
        try:
            if not self.token:
                self.notify(TOKEN_MISSING)
                return

            editing = self.edit_comment or {}
            if self.current_user_id != comment_author_id(editing):
                self.notify(
                    "You are restricted to edit this comment, "
                    "as you are not the owner."
                )
                return

            if not editing.get("id") or not self.new_comment.strip():
                self.notify("No comment selected or content is empty.")
                return

            data = self._request(
                "PUT",
                f"/v1/comments/{editing['id']}",
                "Failed to update the comment. Please try again.",
                json={"content": self.new_comment},
            )
            updated = data.get("comment", data) if isinstance(data, dict) else {}
            self.comments = [
                {**c, "content": updated.get("content", self.new_comment)}
                if c.get("id") == editing["id"]
                else c
                for c in self.comments
            ]
            self.notify("Comment updated successfully!")
        except CommentWidgetError as e:
            self.notify(e.message)
        finally:
            self.edit_comment = None
            self.new_comment = ""
            self.loading = False

    def delete_comment(self, comment_id: str, author_id: str | None) -> None:
        """Delete one of the current user's comments."""
        self.loading = True
        try:
            if not self.token:
                self.notify(TOKEN_MISSING)
                return

            if self.current_user_id != (str(author_id) if author_id else None):
                self.notify(
                    "You are restricted to delete this comment, "
                    "as you are not the comment author."
                )
                return

            self._request(
                "DELETE",
                f"/v1/comments/{comment_id}",
                "Failed to delete the comment. Please try again.",
            )
            self.comments = [c for c in self.comments if c.get("id") != comment_id]
            self.notify("Comment deleted successfully!")
        except CommentWidgetError as e:
            self.notify(e.message)
        finally:
            self.loading = False

    def submit(self) -> None:
        """Form submit: update in edit mode, add otherwise."""
        if self.edit_comment:
            self.update_comment()
        else:
            self.add_comment()

    def toggle_comments(self) -> None:
        """Show or hide the comments list."""
        self.hide_comments = not self.hide_comments

    def set_sort_option(self, option: str) -> None:
        self.sort_option = option

    # ==========================================================================
    # View
    # ==========================================================================

    @property
    def can_submit(self) -> bool:
        """Submit is enabled for non-blank input while idle."""
        return bool(self.new_comment.strip()) and not self.loading

    def sorted_comments(self) -> list[dict[str, Any]]:
        """A sorted copy of the comments. Unknown options keep list order."""
        if self.sort_option not in (SORT_NEWEST, SORT_OLDEST):
            return list(self.comments)

        return sorted(
            self.comments,
            key=lambda c: parse_timestamp(c.get("created_at")) or _EPOCH,
            reverse=self.sort_option == SORT_NEWEST,
        )

    def render(self) -> list[str]:
        """Render the section as text lines, top to bottom."""
        lines = [
            "Edit your comment" if self.edit_comment else "Leave a comment",
            "Update your comment..." if self.edit_comment else "Write a comment...",
        ]

        if self.loading:
            lines.append("Processing...")
        elif self.edit_comment:
            lines.append("Update Comment")
        else:
            lines.append("Comment")
        if self.edit_comment:
            lines.append("Cancel")

        lines.append(f"Sort by: {self.sort_option.capitalize()}")
        lines.append("Show comments" if self.hide_comments else "Hide comments")

        if not self.hide_comments:
            for comment in self.sorted_comments():
                lines.append(comment.get("content", ""))
                lines.append(format_timestamp(comment.get("created_at")))
                lines.append("Edit")
                lines.append("Delete")

        return lines
