"""Bundled passphrase word lists (JSON arrays of strings)."""
