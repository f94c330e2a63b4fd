"""Student relationship services (parent links)."""
