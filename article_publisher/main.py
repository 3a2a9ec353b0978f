import os
import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from article_publisher.db import Database
from article_publisher.errors import (
    MissingFileError,
    NotFoundError,
    PayloadTooLargeError,
    UploadError,
    ValidationError,
)
from article_publisher.media import MAX_UPLOAD_BYTES, CloudinaryGateway
from article_publisher.schemas import ArticleIn, ArticleOut, MessageOut, UploadOut
from article_publisher.sites import build_site_filter
from article_publisher.store import ArticleStore, serialize_article

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

database = Database.from_env()
database.wait_until_ready()
database.create_schema()

media_gateway = CloudinaryGateway.from_env()
logger.info("Cloudinary configured: %s", media_gateway.describe())


def get_db():
    yield from database.session()


def get_media_gateway() -> CloudinaryGateway:
    return media_gateway


def get_store(db: Session = Depends(get_db)) -> ArticleStore:
    return ArticleStore(db)


app = FastAPI(title="article-publisher")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.post("/api/upload", response_model=UploadOut)
async def upload_image(
    request: Request,
    gateway: CloudinaryGateway = Depends(get_media_gateway),
):
    file_bytes = None
    mime_type = None
    async with request.form() as form:
        # A plain text ``image`` field counts as no file at all.
        image = form.get("image")
        if isinstance(image, UploadFile):
            # One byte past the limit is enough to know the file is too large.
            file_bytes = await image.read(MAX_UPLOAD_BYTES + 1)
            mime_type = image.content_type
    try:
        image_url = await run_in_threadpool(gateway.upload, file_bytes, mime_type)
    except MissingFileError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PayloadTooLargeError as e:
        logger.warning("Rejected upload: %s", e)
        raise HTTPException(status_code=413, detail=str(e))
    except UploadError as e:
        logger.error("Cloudinary error: %s", e)
        raise HTTPException(status_code=500, detail=f"Upload error: {e}")
    return UploadOut(image_url=image_url)


@app.get("/api/articles", response_model=List[ArticleOut])
def list_articles(
    site: Optional[str] = None,
    store: ArticleStore = Depends(get_store),
):
    try:
        articles = store.find(build_site_filter(site))
    except SQLAlchemyError:
        logger.exception("Failed to fetch articles for site=%s", site)
        raise HTTPException(status_code=500, detail="Failed to fetch articles")
    return [serialize_article(a) for a in articles]


@app.get("/api/articles/{article_id}", response_model=ArticleOut)
def get_article(article_id: str, store: ArticleStore = Depends(get_store)):
    try:
        article = store.get(article_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Article not found")
    except SQLAlchemyError:
        logger.exception("Failed to fetch article %s", article_id)
        raise HTTPException(status_code=500, detail="Failed to fetch article")
    return serialize_article(article)


@app.post("/api/articles", response_model=ArticleOut, status_code=201)
def create_article(article: ArticleIn, store: ArticleStore = Depends(get_store)):
    logger.info(
        "Received article creation request: title=%r date=%r",
        article.title,
        article.date,
    )
    # Validation failures are reported like storage failures.
    try:
        db_article = store.create(article)
    except ValidationError as e:
        logger.warning("Rejected article: %s", e)
        raise HTTPException(status_code=500, detail="Failed to create article")
    except (ValueError, SQLAlchemyError):
        logger.exception("Failed to create article")
        raise HTTPException(status_code=500, detail="Failed to create article")
    return serialize_article(db_article)


@app.put("/api/articles/{article_id}", response_model=ArticleOut)
def update_article(
    article_id: str,
    article: ArticleIn,
    store: ArticleStore = Depends(get_store),
):
    try:
        db_article = store.update(article_id, article)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Article not found")
    except (ValueError, SQLAlchemyError):
        logger.exception("Failed to update article %s", article_id)
        raise HTTPException(status_code=500, detail="Failed to update article")
    return serialize_article(db_article)


@app.delete("/api/articles/{article_id}", response_model=MessageOut)
def delete_article(article_id: str, store: ArticleStore = Depends(get_store)):
    try:
        store.delete(article_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Article not found")
    except SQLAlchemyError:
        logger.exception("Failed to delete article %s", article_id)
        raise HTTPException(status_code=500, detail="Failed to delete article")
    return MessageOut(message="Article deleted successfully")


def run():
    import uvicorn

    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5001")),
        log_level="info",
    )


if __name__ == "__main__":
    run()
