"""
ABOUTME: Parses comments.xml and tracks comment ranges inside a paragraph
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .common import Diagnostics
from .xml_tree import XmlNode


@dataclass(frozen=True)
class Comment:
    comment_id: str
    author: str = 'Unknown'
    initials: str = ''
    date: str = ''
    content: str = ''

    def to_mark(self) -> dict:
        return {
            'type': 'comment',
            'attrs': {
                'commentId': self.comment_id,
                'author': self.author,
                'date': self.date,
                'content': self.content,
            },
        }


def _comment_text(comment: XmlNode) -> str:
    """Concatenate w:t text of the comment's own paragraphs, in order."""
    content = ''
    for paragraph in comment.find_all('p'):
        for t in paragraph.iter('t'):
            content += t.text
    return content


class CommentTable:
    """Comments keyed by w:id, built once per document load."""

    def __init__(self, comments: Dict[str, Comment] = None):
        self._comments = dict(comments or {})

    def __len__(self):
        return len(self._comments)

    def __contains__(self, comment_id):
        return comment_id in self._comments

    def get(self, comment_id: str) -> Optional[Comment]:
        return self._comments.get(comment_id)

    @classmethod
    def empty(cls) -> 'CommentTable':
        return cls()

    @classmethod
    def from_xml(cls, root: Optional[XmlNode]) -> 'CommentTable':
        if root is None:
            return cls.empty()
        comments = {}
        for comment in root.find_all('comment'):
            comment_id = comment.get('id')
            if not comment_id:
                continue
            comments[comment_id] = Comment(
                comment_id=comment_id,
                author=comment.get('author') or 'Unknown',
                initials=comment.get('initials') or '',
                date=comment.get('date') or '',
                content=_comment_text(comment),
            )
        return cls(comments)


class CommentRangeStack:
    """
    Comment ids whose range is open at the current point of a paragraph.

    open() pushes an id (ignored if already open); close() removes it
    wherever it sits, since ranges may close out of order. Order is kept
    so marks come out in the order their ranges opened.
    """

    def __init__(self):
        self._ids: List[str] = []

    def __bool__(self):
        return bool(self._ids)

    def __len__(self):
        return len(self._ids)

    @property
    def active_ids(self) -> List[str]:
        return list(self._ids)

    def open(self, comment_id: Optional[str]):
        if comment_id and comment_id not in self._ids:
            self._ids.append(comment_id)

    def close(self, comment_id: Optional[str]):
        if comment_id in self._ids:
            self._ids.remove(comment_id)

    def marks(self, comments: CommentTable) -> List[dict]:
        """One comment mark per open id; ids missing from the table are skipped."""
        result = []
        for comment_id in self._ids:
            comment = comments.get(comment_id)
            if comment is not None:
                result.append(comment.to_mark())
        return result

    def check_closed(self, diagnostics: Diagnostics, where: str = 'paragraph'):
        """Warn about ranges left open at the end of a paragraph; never raises."""
        if self._ids:
            diagnostics.warn(
                f"Comment range(s) {', '.join(self._ids)} still open at end of {where}; "
                f"ranges spanning paragraphs are cut at the paragraph boundary"
            )
