from .json import append_jsonl, write_json

__all__ = ["append_jsonl", "write_json"]
