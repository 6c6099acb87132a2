"""Persistence helpers."""

from .json_store import dump_json, read_json, write_json_atomic, write_text_atomic

__all__ = ["dump_json", "read_json", "write_json_atomic", "write_text_atomic"]
