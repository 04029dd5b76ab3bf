"""Memo sources: where memos and their attachment bytes come from."""
