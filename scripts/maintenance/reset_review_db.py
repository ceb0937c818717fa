"""
Reset the review database.

DANGEROUS: This deletes all review records!
Only use when you want to start fresh for testing.

Usage:
    python -m scripts.maintenance.reset_review_db
"""

from korvocab import config
from korvocab.fsrs.database import SqlAlchemyReviewStore


def main():
    print("=" * 60)
    print("WARNING: Reset Review Database")
    print("=" * 60)
    print()
    print(f"Database: {config.get_database_url()}")
    print("This will DELETE all review records:")
    print("  - Memory state (stability, difficulty, lapses)")
    print("  - Review history of every word")
    print()

    response = input("Are you sure you want to reset? (type 'yes' to confirm): ")

    if response.lower() == "yes":
        print("\nResetting database...")
        SqlAlchemyReviewStore().reset_db()
        print("✓ Database reset complete!")
        print("\nThe database now has empty tables ready for new reviews.")
    else:
        print("\nCancelled. No changes made.")


if __name__ == "__main__":
    main()
