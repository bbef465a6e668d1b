SCHEMA_SQL = """
PRAGMA foreign_keys = ON;

CREATE TABLE IF NOT EXISTS notes (
    id TEXT PRIMARY KEY,
    content TEXT NOT NULL,
    created_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL,
    deleted_at INTEGER,
    pinned INTEGER NOT NULL DEFAULT 0,
    CHECK (updated_at >= created_at)
);

CREATE INDEX IF NOT EXISTS notes_updated_at_idx
    ON notes(updated_at DESC) WHERE deleted_at IS NULL;

CREATE TABLE IF NOT EXISTS tags (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE CHECK (name <> '')
);

CREATE TABLE IF NOT EXISTS notes_tags (
    note_id TEXT NOT NULL,
    tag_id INTEGER NOT NULL,
    UNIQUE(note_id, tag_id),
    FOREIGN KEY(note_id) REFERENCES notes(id) ON DELETE CASCADE,
    FOREIGN KEY(tag_id) REFERENCES tags(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS notes_tags_tag_idx ON notes_tags(tag_id);
"""

# The index row is maintained by the store itself (insert on create,
# delete + insert on update), so no sync triggers are declared here.
FTS_SQL = """
CREATE VIRTUAL TABLE IF NOT EXISTS notes_fts
    USING fts5(note_id UNINDEXED, content);
"""
