"""
Reset the hash history table. Every browser's history is removed.
"""
import os
import sqlite3
from pathlib import Path

# Configuration
BASE_DIR = Path(__file__).parent.parent
DB_FILE = Path(os.environ.get("HASHIFY_DB_FILE", BASE_DIR / "hashify.db"))
SCHEMA_FILE = BASE_DIR / "schema.sql"

def reset_history(db_file=DB_FILE):
    """Drop the hash_history table and recreate it from schema.sql."""
    conn = None
    try:
        conn = sqlite3.connect(db_file)
        cursor = conn.cursor()

        cursor.execute("DROP TABLE IF EXISTS hash_history")
        cursor.executescript(SCHEMA_FILE.read_text(encoding="utf-8"))

        conn.commit()
        print("History reset successfully.")
        return True
    except sqlite3.Error as e:
        print(f"Database error: {e}")
        return False
    finally:
        if conn:
            conn.close()

if __name__ == "__main__":
    print(f"Resetting hash history in {DB_FILE}...")
    reset_history()
    print("Reset complete.")
