#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the database, storage and OpenAI settings are working.
Usage: python scripts/check_connections.py
"""
from jobboard.core.config import get_settings
from jobboard.core.errors import APIError
from jobboard.db.postgres import Database
from jobboard.services.openai_client import CompletionClient
from jobboard.services.storage_service import SupabaseStorageClient


def main():
    settings = get_settings()
    print("=" * 50)
    print("JOB BOARD - CONNECTION CHECK")
    print("=" * 50)

    # Database
    print("\n[1] Checking database...")
    db = Database.from_settings(settings)
    if db.ping():
        print("    ✅ Database: CONNECTED")
        print(f"    Tables present: {', '.join(db.existing_tables()) or 'none'}")
    else:
        print("    ❌ Database: FAILED")
    db.dispose()

    # Storage
    print("\n[2] Checking storage...")
    print(f"    URL: {settings.supabase_url}")
    if settings.supabase_service_role_key:
        storage = SupabaseStorageClient.from_settings(settings)
        try:
            names = [b.get("name") for b in storage.list_buckets()]
            print(f"    ✅ Storage: CONNECTED (buckets: {', '.join(names) or 'none'})")
            if settings.resume_bucket not in names:
                print(f"    ⚠️  Bucket '{settings.resume_bucket}' missing, call GET /api/create-storage-bucket")
        except APIError as e:
            print(f"    ❌ Storage: FAILED ({e.message})")
        finally:
            storage.close()
    else:
        print("    ⚠️  Storage: service role key not configured (skip for now)")

    # OpenAI (only if API key is set)
    print("\n[3] Checking OpenAI API...")
    ai = CompletionClient.from_settings(settings)
    if ai.configured:
        print(f"    Model: {settings.openai_model}")
        try:
            ai.complete("Reply with the word OK.", max_tokens=5, temperature=0)
            print("    ✅ OpenAI: CONNECTED")
        except APIError as e:
            print(f"    ❌ OpenAI: FAILED ({e.details or e.message})")
        finally:
            ai.close()
    else:
        print("    ⚠️  OpenAI: API key not configured (skip for now)")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
