from docextract.database.connection import get_connection
from docextract.logging.logger import Log

DOCUMENTS_DDL = """
CREATE TABLE IF NOT EXISTS documents (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    display_name TEXT NOT NULL,
    original_filename TEXT NOT NULL,
    file_type TEXT NOT NULL CHECK (file_type IN ('pdf', 'docx')),
    blob_key TEXT NOT NULL,
    file_size_bytes BIGINT NOT NULL CHECK (file_size_bytes >= 0),
    extraction_state TEXT NOT NULL DEFAULT 'pending'
        CHECK (extraction_state IN ('pending', 'processing', 'completed', 'failed')),
    extracted_data JSONB,
    last_error TEXT,
    extraction_attempt INTEGER NOT NULL DEFAULT 0,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    CHECK ((extraction_state = 'completed') = (extracted_data IS NOT NULL)),
    CHECK ((extraction_state = 'failed') = (last_error IS NOT NULL))
);

CREATE INDEX IF NOT EXISTS documents_owner_created_idx
    ON documents (owner_id, created_at DESC);

CREATE INDEX IF NOT EXISTS documents_processing_updated_idx
    ON documents (updated_at)
    WHERE extraction_state = 'processing';
"""


def create_schema() -> None:
    """Create the documents table and its indexes if they do not exist."""
    with get_connection() as conn:
        conn.execute(DOCUMENTS_DDL)
        conn.commit()
    Log.info("Database schema ensured")
