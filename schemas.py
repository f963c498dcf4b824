"""
Database Schemas for the MemeFi ledger

Each Pydantic model represents a MongoDB document shape.
- Meme -> "meme" (keyed by the caller-supplied id)
- Comment -> "comment" (one document per comment, ordered by seq)
- UserStats -> "user_stats" (keyed by identity)
"""
from pydantic import BaseModel, Field

MAX_COMMENT_LENGTH = 500
MAX_ROYALTY = 100
# Largest value a MongoDB int64 field can hold
MAX_TIMESTAMP = 2 ** 63 - 1


class Meme(BaseModel):
    """
    Minted meme record
    Collection: "meme"
    """
    id: str = Field(..., description="Caller-supplied identifier, unique and immutable")
    owner_id: str = Field(..., description="Current owner identity")
    creator_id: str = Field(..., description="Identity that minted the meme")
    media_url: str = Field(..., description="Link to the meme media, stored as given")
    title: str = Field(..., description="Meme title")
    description: str = Field(..., description="Free-form description")
    royalty: int = Field(..., ge=0, le=MAX_ROYALTY, description="Royalty percentage")
    likes_count: int = Field(0, ge=0, description="Number of identities currently liking the meme")
    comments_count: int = Field(0, ge=0, description="Number of comments on the meme")
    last_like_timestamp: int = Field(0, ge=0, le=MAX_TIMESTAMP, description="Logical time of the most recent like, 0 if never liked")


class Comment(BaseModel):
    """
    Comments on memes
    Collection: "comment"
    """
    user_id: str = Field(..., description="Who commented")
    text: str = Field(..., description="Trimmed comment body")
    timestamp: int = Field(..., ge=0, le=MAX_TIMESTAMP, description="Logical time the comment was made")


class UserStats(BaseModel):
    """
    Aggregates over the memes an identity owns
    Collection: "user_stats"
    """
    total_likes: int = Field(0, ge=0)
    total_comments: int = Field(0, ge=0)
    total_earnings: int = Field(0, ge=0, description="Reserved for monetization, never mutated")


# Request bodies

class MintRequest(BaseModel):
    id: str = Field(..., min_length=1)
    media_url: str
    title: str
    description: str
    royalty: int = Field(..., ge=0)


class CommentBody(BaseModel):
    text: str

