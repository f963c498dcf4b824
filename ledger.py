"""
Ledger facade over the meme stores

A Ledger is constructed once per database and handed to every caller. Each
public operation checks all of its preconditions before the first write, so a
rejected call leaves every collection as it was. Caller identity and logical
time are explicit arguments.
"""
import logging
from typing import List, Optional

from pymongo.database import Database

from database import create_document
from errors import (
    AlreadyInitialized,
    AlreadyLiked,
    CommentTooLong,
    DuplicateIdentifier,
    EmptyComment,
    InvalidRoyalty,
    InvalidTimestamp,
    LedgerNotInitialized,
    NoLikeHistory,
    NotLiked,
    RecordNotFound,
)
from schemas import MAX_COMMENT_LENGTH, MAX_ROYALTY, MAX_TIMESTAMP, Comment, Meme, UserStats
from stores import CommentLog, IdentifierRegistry, LikeIndex, RecordStore, UserStatsStore

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100

STATE_COLLECTION = "ledger_state"
STATE_ID = "ledger"


class Ledger:
    def __init__(self, db: Database):
        self.db = db
        self.records = RecordStore(db)
        self.registry = IdentifierRegistry(db)
        self.likes = LikeIndex(db)
        self.comments = CommentLog(db)
        self.stats = UserStatsStore(db)

    # Construction

    @staticmethod
    def exists(db: Database) -> bool:
        return db[STATE_COLLECTION].find_one({"_id": STATE_ID}) is not None

    @classmethod
    def initialize(cls, db: Database) -> "Ledger":
        if cls.exists(db):
            raise AlreadyInitialized()
        ledger = cls(db)
        ledger.comments.ensure_indexes()
        create_document(db, STATE_COLLECTION, {"_id": STATE_ID})
        logger.info("Initialized ledger in database %s", db.name)
        return ledger

    @classmethod
    def open(cls, db: Database) -> "Ledger":
        if not cls.exists(db):
            raise LedgerNotInitialized()
        return cls(db)

    @classmethod
    def open_or_initialize(cls, db: Database) -> "Ledger":
        if cls.exists(db):
            return cls.open(db)
        return cls.initialize(db)

    # Records

    def mint(self, id: str, media_url: str, title: str, description: str, royalty: int,
             caller: str) -> Meme:
        if royalty < 0 or royalty > MAX_ROYALTY:
            logger.warning("Rejected mint of %s by %s: royalty %s", id, caller, royalty)
            raise InvalidRoyalty()
        if self.records.contains(id):
            logger.warning("Rejected mint of %s by %s: duplicate id", id, caller)
            raise DuplicateIdentifier()

        meme = Meme(
            id=id,
            owner_id=caller,
            creator_id=caller,
            media_url=media_url,
            title=title,
            description=description,
            royalty=royalty,
        )
        self.records.insert(meme)
        self.registry.append(id)
        logger.info("Minted meme %s for %s", id, caller)
        return meme

    def get(self, id: str) -> Optional[Meme]:
        return self.records.get(id)

    def list_by_owner(self, owner_id: str) -> List[Meme]:
        result = []
        for meme_id in self.registry:
            meme = self.records.get(meme_id)
            if meme and meme.owner_id == owner_id:
                result.append(meme)
        return result

    def list_all(self, from_index: Optional[int] = None, limit: Optional[int] = None) -> List[Meme]:
        """Return records in registry order from `from_index`.

        `limit` defaults to 50 and never exceeds 100. A `from_index` past the
        end gives an empty list. Negative arguments count as zero.
        """
        from_index = 0 if from_index is None else max(0, from_index)
        limit = max(0, min(DEFAULT_PAGE_SIZE if limit is None else limit, MAX_PAGE_SIZE))
        stop = min(from_index + limit, len(self.registry))
        result = []
        for meme_id in self.registry.slice(from_index, stop):
            meme = self.records.get(meme_id)
            if meme:
                result.append(meme)
        return result

    def count(self) -> int:
        return len(self.registry)

    # Likes

    def _require(self, meme_id: str) -> Meme:
        meme = self.records.get(meme_id)
        if meme is None:
            raise RecordNotFound()
        return meme

    @staticmethod
    def _check_timestamp(action: str, meme_id: str, caller: str, timestamp: int) -> None:
        if timestamp < 0 or timestamp > MAX_TIMESTAMP:
            logger.warning("Rejected %s of %s by %s: timestamp %s", action, meme_id, caller, timestamp)
            raise InvalidTimestamp()

    def like(self, meme_id: str, caller: str, timestamp: int) -> None:
        meme = self._require(meme_id)
        if self.likes.contains(meme_id, caller):
            logger.warning("Rejected like of %s by %s: already liked", meme_id, caller)
            raise AlreadyLiked()
        self._check_timestamp("like", meme_id, caller, timestamp)

        self.likes.add(meme_id, caller)
        self.records.increment(meme_id, "likes_count", last_like_timestamp=timestamp)
        self.stats.increment(meme.owner_id, "total_likes")
        logger.info("%s liked meme %s", caller, meme_id)

    def unlike(self, meme_id: str, caller: str) -> None:
        meme = self._require(meme_id)
        if not self.likes.has_entry(meme_id):
            logger.warning("Rejected unlike of %s by %s: no likes recorded", meme_id, caller)
            raise NoLikeHistory()
        if not self.likes.contains(meme_id, caller):
            logger.warning("Rejected unlike of %s by %s: not liked", meme_id, caller)
            raise NotLiked()

        self.likes.remove(meme_id, caller)
        # last_like_timestamp is left as is
        self.records.update(meme_id, likes_count=max(0, meme.likes_count - 1))
        self.stats.decrement(meme.owner_id, "total_likes")
        logger.info("%s unliked meme %s", caller, meme_id)

    def get_likes(self, meme_id: str) -> int:
        return self.likes.size(meme_id)

    # Comments

    def comment(self, meme_id: str, text: str, caller: str, timestamp: int) -> Comment:
        meme = self._require(meme_id)
        trimmed = text.strip()
        if not trimmed:
            logger.warning("Rejected comment on %s by %s: empty", meme_id, caller)
            raise EmptyComment()
        if len(text) > MAX_COMMENT_LENGTH:
            logger.warning("Rejected comment on %s by %s: %d characters", meme_id, caller, len(text))
            raise CommentTooLong()
        self._check_timestamp("comment", meme_id, caller, timestamp)

        comment = Comment(user_id=caller, text=trimmed, timestamp=timestamp)
        self.comments.append(meme_id, comment)
        self.records.increment(meme_id, "comments_count")
        self.stats.increment(meme.owner_id, "total_comments")
        logger.info("%s commented on meme %s", caller, meme_id)
        return comment

    def get_comments(self, meme_id: str) -> List[Comment]:
        return self.comments.entries(meme_id)

    # Stats

    def get_user_stats(self, identity: str) -> UserStats:
        return self.stats.get(identity)
