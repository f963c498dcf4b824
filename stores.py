"""
MongoDB-backed stores behind the ledger

Collections:
- "meme"           one document per record, _id = meme id
- "meme_registry"  append-only sequence, _id = slot index
- "like_set"       one document per liked meme, created on first like
- "comment"        one document per comment, ordered by seq within a meme
- "user_stats"     one document per identity, _id = identity

Stores only read and write; preconditions are checked by the ledger before
any store is touched.
"""
from typing import Iterator, List, Optional

from pymongo import ASCENDING
from pymongo.database import Database

from schemas import Meme, Comment, UserStats


def to_record(doc: dict) -> Meme:
    data = dict(doc)
    data["id"] = data.pop("_id")
    return Meme.model_validate(data)


class RecordStore:
    collection_name = "meme"

    def __init__(self, db: Database):
        self.collection = db[self.collection_name]

    def contains(self, meme_id: str) -> bool:
        return self.collection.find_one({"_id": meme_id}) is not None

    def get(self, meme_id: str) -> Optional[Meme]:
        doc = self.collection.find_one({"_id": meme_id})
        return to_record(doc) if doc else None

    def insert(self, meme: Meme) -> None:
        data = meme.model_dump()
        data["_id"] = data.pop("id")
        self.collection.insert_one(data)

    def update(self, meme_id: str, **fields) -> None:
        self.collection.update_one({"_id": meme_id}, {"$set": fields})

    def increment(self, meme_id: str, field: str, amount: int = 1, **fields) -> None:
        update = {"$inc": {field: amount}}
        if fields:
            update["$set"] = fields
        self.collection.update_one({"_id": meme_id}, update)


class IdentifierRegistry:
    collection_name = "meme_registry"

    def __init__(self, db: Database):
        self.collection = db[self.collection_name]

    def __len__(self) -> int:
        return self.collection.count_documents({})

    def append(self, meme_id: str) -> int:
        index = len(self)
        self.collection.insert_one({"_id": index, "meme_id": meme_id})
        return index

    def slice(self, start: int, stop: int) -> List[str]:
        if start >= stop:
            return []
        cursor = self.collection.find({"_id": {"$gte": start, "$lt": stop}}).sort("_id", ASCENDING)
        return [doc["meme_id"] for doc in cursor]

    def __iter__(self) -> Iterator[str]:
        for doc in self.collection.find().sort("_id", ASCENDING):
            yield doc["meme_id"]


class LikeIndex:
    collection_name = "like_set"

    def __init__(self, db: Database):
        self.collection = db[self.collection_name]

    def has_entry(self, meme_id: str) -> bool:
        # An entry survives after its last member is removed
        return self.collection.find_one({"_id": meme_id}) is not None

    def members(self, meme_id: str) -> List[str]:
        doc = self.collection.find_one({"_id": meme_id})
        return list(doc["members"]) if doc else []

    def contains(self, meme_id: str, user_id: str) -> bool:
        return self.collection.find_one({"_id": meme_id, "members": user_id}) is not None

    def add(self, meme_id: str, user_id: str) -> None:
        self.collection.update_one({"_id": meme_id}, {"$addToSet": {"members": user_id}}, upsert=True)

    def remove(self, meme_id: str, user_id: str) -> None:
        self.collection.update_one({"_id": meme_id}, {"$pull": {"members": user_id}})

    def size(self, meme_id: str) -> int:
        return len(self.members(meme_id))


class CommentLog:
    collection_name = "comment"

    def __init__(self, db: Database):
        self.collection = db[self.collection_name]

    def ensure_indexes(self) -> None:
        self.collection.create_index([("meme_id", ASCENDING), ("seq", ASCENDING)], unique=True)

    def length(self, meme_id: str) -> int:
        return self.collection.count_documents({"meme_id": meme_id})

    def append(self, meme_id: str, comment: Comment) -> int:
        seq = self.length(meme_id)
        doc = comment.model_dump()
        doc.update(meme_id=meme_id, seq=seq)
        self.collection.insert_one(doc)
        return seq

    def entries(self, meme_id: str) -> List[Comment]:
        cursor = self.collection.find({"meme_id": meme_id}).sort("seq", ASCENDING)
        return [Comment(user_id=d["user_id"], text=d["text"], timestamp=d["timestamp"]) for d in cursor]


class UserStatsStore:
    collection_name = "user_stats"

    def __init__(self, db: Database):
        self.collection = db[self.collection_name]

    def get(self, identity: str) -> UserStats:
        doc = self.collection.find_one({"_id": identity})
        if not doc:
            return UserStats()
        # total_earnings is kept as a decimal string, it can outgrow int64
        return UserStats(
            total_likes=doc.get("total_likes", 0),
            total_comments=doc.get("total_comments", 0),
            total_earnings=int(doc.get("total_earnings", "0")),
        )

    def put(self, identity: str, stats: UserStats) -> None:
        data = stats.model_dump()
        data["total_earnings"] = str(stats.total_earnings)
        self.collection.replace_one({"_id": identity}, data, upsert=True)

    def increment(self, identity: str, field: str) -> UserStats:
        self.collection.update_one(
            {"_id": identity},
            {"$inc": {field: 1}, "$setOnInsert": {"total_earnings": "0"}},
            upsert=True,
        )
        return self.get(identity)

    def decrement(self, identity: str, field: str) -> UserStats:
        """Subtract one from a counter of `identity`, clamping at zero."""
        stats = self.get(identity)
        setattr(stats, field, max(0, getattr(stats, field) - 1))
        self.put(identity, stats)
        return stats
