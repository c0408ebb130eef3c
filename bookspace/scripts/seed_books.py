# bookspace/scripts/seed_books.py

"""
Seed the Book Space catalog from one or more JSON files.

Usage examples:

  # Default: seed bookspace/data/books.json
  python -m bookspace.scripts.seed_books

  # Seed specific files (later files win on slug collisions)
  python -m bookspace.scripts.seed_books \
    --file bookspace/data/books.json \
    --file more_books.json

Records are matched on slug, so re-running the script updates books in place.
Ratings are derived from reviews and are never overwritten here.
"""

import argparse
import json
import logging
from pathlib import Path

from pydantic import ValidationError
from sqlalchemy.orm import Session

from bookspace.database import SessionLocal
from bookspace import models
from bookspace.schemas.book import BookCreate

logger = logging.getLogger("bookspace.seed_books")

BASE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_FILES = [
    BASE_DIR / "data" / "books.json",
]


def _load_books_from_file(path: Path) -> list[dict]:
    """Load a single JSON file of books, or return empty if file missing."""
    if not path.exists():
        logger.warning("File not found, skipping: %s", path)
        return []

    logger.info("Loading books from: %s", path)
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"Expected list of books in {path}, got {type(data)}")

    return data


def _collect_books(files: list[Path]) -> list[dict]:
    all_books: list[dict] = []

    for path in files:
        all_books.extend(_load_books_from_file(path))

    if not all_books:
        raise FileNotFoundError(
            "No books loaded. Checked files:\n"
            + "\n".join(str(p) for p in files)
        )

    logger.info("Total raw book records loaded: %d", len(all_books))
    return all_books


def _apply(book: models.Book, data: BookCreate) -> None:
    book.title = data.title.strip()
    book.author = data.author
    book.description = data.description
    book.release_year = data.release_year
    book.page_count = data.page_count
    book.tags = data.tags
    book.moods = data.moods
    book.genres = data.genres
    cover = data.cover_image
    book.cover_image_url = cover.url if cover else None
    book.cover_image_width = cover.width if cover else None
    book.cover_image_height = cover.height if cover else None


def seed_books(files: list[Path], db: Session | None = None) -> dict:
    """Upsert books by slug. Returns created/updated/skipped counts."""
    raw_books = _collect_books(files)

    owns_session = db is None
    if owns_session:
        db = SessionLocal()
    try:
        created = 0
        updated = 0
        skipped = 0

        for raw in raw_books:
            try:
                data = BookCreate.model_validate(raw)
            except ValidationError as e:
                logger.warning("Skipping invalid record %r: %s", raw.get("slug") or raw.get("title"), e)
                skipped += 1
                continue

            slug = data.slug.strip()
            existing = db.query(models.Book).filter(models.Book.slug == slug).one_or_none()

            if existing:
                _apply(existing, data)
                updated += 1
                continue

            book = models.Book(slug=slug, rating=0, ratings_count=0)
            _apply(book, data)
            db.add(book)
            # Flush so a repeated slug later in the same run updates this row
            db.flush()
            created += 1

        db.commit()
        logger.info("Seed complete. Created=%d, Updated=%d, Skipped=%d", created, updated, skipped)
        return {"created": created, "updated": updated, "skipped": skipped}
    finally:
        if owns_session:
            db.close()


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    parser = argparse.ArgumentParser(
        description="Seed the Book Space book catalog from JSON files."
    )
    parser.add_argument(
        "--file",
        "-f",
        action="append",
        dest="files",
        help=(
            "Path to a JSON file of books. "
            "Can be specified multiple times. "
            "If omitted, uses bookspace/data/books.json."
        ),
    )

    args = parser.parse_args()

    if args.files:
        files = [Path(f).resolve() for f in args.files]
    else:
        files = [p for p in DEFAULT_FILES if p.exists()]

    if not files:
        raise FileNotFoundError("No seed files found. Use --file to specify one explicitly.")

    logger.info("Using files: %s", ", ".join(str(p) for p in files))
    seed_books(files)


if __name__ == "__main__":
    main()
