"""Core services: card store, index maintenance, search, CSV ingestion."""
from mixaid.core.card_store import CardStore
from mixaid.core.query_engine import QueryEngine

__all__ = ["CardStore", "QueryEngine"]
