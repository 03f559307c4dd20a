from .jsonl_store import ReportJsonlStore

__all__ = ["ReportJsonlStore"]
