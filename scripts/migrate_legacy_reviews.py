"""
Legacy Review Migration Script

One-time script to move review records from an exported chat journal into
the review database, converting interval-doubling records on the way.

Usage:
    python scripts/migrate_legacy_reviews.py path/to/export.json
    python scripts/migrate_legacy_reviews.py export.json --dry-run
    python scripts/migrate_legacy_reviews.py export.json --import-vocabulary

This will:
1. Read every day's reviewSchedule from the export
2. Migrate records without a schema version to the memory-model shape
3. Save each record under its conversation day
4. Optionally copy the day's vocabulary items to MongoDB

Requires DATABASE_URL (and optionally TEST_MODE); --import-vocabulary also
requires MONGO_URI.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError

from korvocab import config
from korvocab.errors import InvalidState
from korvocab.fsrs.database import SqlAlchemyReviewStore
from korvocab.fsrs.migration import (
    is_migrated,
    iter_journal_records,
    iter_journal_vocabulary,
    migrate_if_legacy,
)
from korvocab.lexicon_repo import MongoVocabularyRepository
from korvocab.schemas import VocabularyItem


def migrate_export(
    export_path: Path,
    learner_id: str,
    dry_run: bool = False,
    import_vocabulary: bool = False
) -> None:
    print(f"{'='*60}")
    print(f"Migrating reviews from: {export_path.name}")
    print(f"Learner: {learner_id}")
    print(f"{'='*60}")

    journal = json.loads(export_path.read_text(encoding="utf-8"))

    store = None
    if not dry_run:
        store = SqlAlchemyReviewStore(learner_id=learner_id)
        store.init_db()
        print(f"[OK] Connected to {config.get_database_url()}")

    migrated_count = 0
    current_count = 0
    error_count = 0

    for day_id, raw in iter_journal_records(journal):
        vocabulary_id = raw.get("vocabularyId", "?")
        already_current = is_migrated(raw)
        try:
            record = migrate_if_legacy(raw)
        except InvalidState as e:
            print(f"[ERROR] {day_id}/{vocabulary_id}: {e}")
            error_count += 1
            continue

        if already_current:
            current_count += 1
        else:
            migrated_count += 1
            print(f"[MIGRATED] {day_id}/{record.vocabulary_id}: S={record.stability:.1f}, "
                  f"reviews={record.total_reviews}, lapses={record.lapses}")

        if store is not None:
            store.save_review_record(day_id, record)

    vocabulary_count = 0
    if import_vocabulary:
        repo = None if dry_run else MongoVocabularyRepository()
        for data in iter_journal_vocabulary(journal):
            try:
                item = VocabularyItem.model_validate(data)
            except ValidationError as e:
                print(f"[ERROR] vocabulary {data.get('id', '?')}: {e}")
                error_count += 1
                continue
            if repo is not None:
                repo.add_vocabulary_item(item)
            vocabulary_count += 1

    print(f"\n{'='*60}")
    print(f"Migrated from legacy:  {migrated_count}")
    print(f"Already current:       {current_count}")
    if import_vocabulary:
        print(f"Vocabulary items:      {vocabulary_count}")
    print(f"Errors:                {error_count}")

    if dry_run:
        print("\n⚠ DRY RUN MODE - No changes were made to the database")


def main():
    parser = argparse.ArgumentParser(
        description="Migrate review records from an exported chat journal"
    )
    parser.add_argument("export", type=Path, help="Path to the exported journal JSON")
    parser.add_argument(
        "--learner-id",
        default=config.get_default_learner_id(),
        help="Learner the records belong to (default: DEFAULT_LEARNER_ID)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Don't write anything, only report what would be migrated"
    )
    parser.add_argument(
        "--import-vocabulary",
        action="store_true",
        help="Also copy vocabulary items to MongoDB"
    )

    args = parser.parse_args()
    config.configure_logging()

    migrate_export(
        args.export,
        learner_id=args.learner_id,
        dry_run=args.dry_run,
        import_vocabulary=args.import_vocabulary
    )


if __name__ == "__main__":
    main()
