import mongomock
import pytest

from ledger import Ledger


@pytest.fixture
def db():
    return mongomock.MongoClient()["memefi_test"]


@pytest.fixture
def ledger(db):
    return Ledger.initialize(db)


@pytest.fixture
def minted(ledger):
    ledger.mint("m1", "https://cdn.example/m1.png", "First", "the first meme", 10, "alice")
    return ledger
