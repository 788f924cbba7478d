from civicdesk.services.cache.ttl_store import TTLEntry, TTLStore

__all__ = ["TTLEntry", "TTLStore"]
