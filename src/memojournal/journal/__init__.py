"""Day-partitioned append-only journal.

Layout:
    <sync_dir>/
    ├── 2025-04-20.md                  # One bucket per local calendar date
    ├── 2025-04-21.md
    └── resources/
        └── abc123_photo.png           # <source fragment>_<sanitized filename>

Every memo becomes one block appended to its bucket. The block ends with a
properties callout whose ``> - ID: <memo id>`` line is how a re-run detects
that the memo was already written.
"""
