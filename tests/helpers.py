def snapshot(db):
    """Every document of every collection, for unchanged-state assertions."""
    state = {}
    for name in db.list_collection_names():
        docs = sorted(repr(sorted(doc.items())) for doc in db[name].find())
        if docs:
            state[name] = docs
    return state


def assert_consistent(ledger):
    owners = {}
    for meme in ledger.list_all(0, 100):
        assert meme.likes_count == ledger.get_likes(meme.id)
        assert meme.comments_count == len(ledger.get_comments(meme.id))
        totals = owners.setdefault(meme.owner_id, [0, 0])
        totals[0] += meme.likes_count
        totals[1] += meme.comments_count
    for owner, (likes, comments) in owners.items():
        stats = ledger.get_user_stats(owner)
        assert stats.total_likes == likes
        assert stats.total_comments == comments
