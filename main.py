import os
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import database
from clock import LogicalClock
from errors import LedgerError
from ledger import Ledger, MAX_PAGE_SIZE
from schemas import Meme, Comment, UserStats, MintRequest, CommentBody

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


# Per-call collaborators

def get_ledger(request: Request) -> Ledger:
    ledger = request.app.state.ledger
    if ledger is None:
        raise HTTPException(status_code=500, detail="Database not configured")
    return ledger


def get_caller(x_account_id: Optional[str] = Header(None)) -> str:
    if not x_account_id or not x_account_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-Account-Id header")
    return x_account_id.strip()


def get_timestamp(request: Request) -> int:
    return request.app.state.clock.tick()


def create_app(db=None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.ledger = Ledger.open_or_initialize(db) if db is not None else None
        yield

    app = FastAPI(title="MemeFi Ledger API", version="1.0.0", lifespan=lifespan)
    app.state.db = db
    app.state.ledger = None
    app.state.clock = LogicalClock()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})

    @app.get("/")
    def read_root():
        return {"message": "MemeFi ledger ready"}

    # Schemas endpoint for admin tools
    @app.get("/schema")
    def get_schema():
        return {
            "meme": Meme.model_json_schema(),
            "comment": Comment.model_json_schema(),
            "user_stats": UserStats.model_json_schema(),
        }

    # Meme Endpoints
    @app.post("/api/memes", response_model=Meme, status_code=201)
    def mint_meme(body: MintRequest, caller: str = Depends(get_caller), ledger: Ledger = Depends(get_ledger)):
        return ledger.mint(body.id, body.media_url, body.title, body.description, body.royalty, caller)

    @app.get("/api/memes", response_model=List[Meme])
    def list_memes(from_index: int = Query(0, ge=0), limit: int = Query(50, ge=0),
                   ledger: Ledger = Depends(get_ledger)):
        return ledger.list_all(from_index, limit)

    @app.get("/api/memes-count")
    def count_memes(ledger: Ledger = Depends(get_ledger)):
        return {"count": ledger.count(), "max_page_size": MAX_PAGE_SIZE}

    @app.get("/api/memes/{meme_id}", response_model=Meme)
    def get_meme(meme_id: str, ledger: Ledger = Depends(get_ledger)):
        meme = ledger.get(meme_id)
        if meme is None:
            raise HTTPException(status_code=404, detail="Meme not found")
        return meme

    @app.get("/api/users/{owner_id}/memes", response_model=List[Meme])
    def list_user_memes(owner_id: str, ledger: Ledger = Depends(get_ledger)):
        return ledger.list_by_owner(owner_id)

    @app.get("/api/users/{user_id}/stats", response_model=UserStats)
    def user_stats(user_id: str, ledger: Ledger = Depends(get_ledger)):
        return ledger.get_user_stats(user_id)

    # Likes
    @app.post("/api/memes/{meme_id}/like")
    def like_meme(meme_id: str, caller: str = Depends(get_caller), timestamp: int = Depends(get_timestamp),
                  ledger: Ledger = Depends(get_ledger)):
        ledger.like(meme_id, caller, timestamp)
        return {"ok": True, "likes": ledger.get_likes(meme_id)}

    @app.delete("/api/memes/{meme_id}/like")
    def unlike_meme(meme_id: str, caller: str = Depends(get_caller), ledger: Ledger = Depends(get_ledger)):
        ledger.unlike(meme_id, caller)
        return {"ok": True, "likes": ledger.get_likes(meme_id)}

    @app.get("/api/memes/{meme_id}/likes")
    def get_likes(meme_id: str, ledger: Ledger = Depends(get_ledger)):
        return {"likes": ledger.get_likes(meme_id)}

    # Comments
    @app.post("/api/memes/{meme_id}/comments", response_model=Comment, status_code=201)
    def add_comment(meme_id: str, body: CommentBody, caller: str = Depends(get_caller),
                    timestamp: int = Depends(get_timestamp), ledger: Ledger = Depends(get_ledger)):
        return ledger.comment(meme_id, body.text, caller, timestamp)

    @app.get("/api/memes/{meme_id}/comments", response_model=List[Comment])
    def get_comments(meme_id: str, ledger: Ledger = Depends(get_ledger)):
        return ledger.get_comments(meme_id)

    # Test endpoint for DB
    @app.get("/test")
    def test_database():
        response = {
            "backend": "✅ Running",
            "database": "❌ Not Available",
            "database_name": None,
            "connection_status": "Not Connected",
            "ledger": "❌ Not Initialized",
            "collections": [],
        }
        try:
            if db is not None:
                response["database"] = "✅ Available"
                response["database_name"] = db.name
                response["connection_status"] = "Connected"
                response["collections"] = db.list_collection_names()[:10]
                if Ledger.exists(db):
                    response["ledger"] = f"✅ Initialized ({app.state.ledger.count()} memes)" \
                        if app.state.ledger is not None else "✅ Initialized"
                response["database"] = "✅ Connected & Working"
        except Exception as e:
            logger.exception("Database check failed")
            response["database"] = f"❌ Error: {str(e)[:50]}"
        response["database_url"] = "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set"
        response["database_name_env"] = "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set"
        return response

    return app


app = create_app(database.db)


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
