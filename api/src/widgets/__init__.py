"""Client-side widgets that consume the blog API."""

from .comment_section import CommentSection, CommentWidgetError


__all__ = [
    "CommentSection",
    "CommentWidgetError",
]
