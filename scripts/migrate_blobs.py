"""
Move existing resume files into the configured STORAGE_BACKEND.

    STORAGE_BACKEND=database python -m scripts.migrate_blobs

Old locators are resolved through every store (configured backend, inline
and the local upload roots), so files written under an earlier backend or
upload directory are still found.
"""
from resume_matcher.core.config import settings
from resume_matcher.database import SessionLocal, init_db
from resume_matcher.services.blob_store import build_blob_store
from resume_matcher.services.resume_service import migrate_blobs


def main():
    init_db()
    source = build_blob_store(settings)
    # Writes always land in the primary backend
    target = source.primary

    db = SessionLocal()
    try:
        print(f"Starting resume migration to '{target.backend_name}' storage...")
        report = migrate_blobs(db, source, target)
    finally:
        db.close()

    print("\nMigration Summary:")
    print(f"- Already in '{target.backend_name}': {len(report.skipped)}")
    print(f"- Successfully migrated: {len(report.migrated)}")
    print(f"- Could not find file: {len(report.missing)}")
    if report.missing:
        print(f"  Resume ids: {', '.join(str(i) for i in report.missing)}")
        print("These resumes stay readable only while their old locator still resolves.")


if __name__ == "__main__":
    main()
