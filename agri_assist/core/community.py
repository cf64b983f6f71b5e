"""
Community question board persisted in the local store.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaValidationError

from .storage import KeyValueStore
from .types import CommunityPost

logger = logging.getLogger(__name__)

POSTS_KEY = "agri-community-posts"

_posts_adapter = TypeAdapter(List[CommunityPost])


class CommunityBoard:
    """
    Ordered list of community posts, newest first.

    Posts are hydrated from the store when the board is created and written back
    after every change.
    """

    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store if store is not None else KeyValueStore()
        self.posts: List[CommunityPost] = self._load()

    def _load(self) -> List[CommunityPost]:
        raw = self.store.get(POSTS_KEY)
        if raw is None:
            return []
        try:
            return _posts_adapter.validate_python(raw)
        except SchemaValidationError as e:
            logger.error(f"Failed to load posts from local store: {e}")
            return []

    def _save(self) -> None:
        self.store.set(POSTS_KEY, _posts_adapter.dump_python(self.posts, mode="json"))

    def _new_id(self, now: datetime) -> str:
        post_id = now.isoformat()
        existing = {post.id for post in self.posts}
        suffix = 1
        candidate = post_id
        while candidate in existing:
            candidate = f"{post_id}-{suffix}"
            suffix += 1
        return candidate

    def add(self, question: str, answer: str) -> CommunityPost:
        """Prepend a new post and persist the board."""
        now = datetime.now(timezone.utc)
        post = CommunityPost(
            id=self._new_id(now),
            question=question,
            answer=answer,
            timestamp=now.astimezone().strftime("%Y-%m-%d %H:%M:%S"),
        )
        self.posts = [post, *self.posts]
        self._save()
        return post
