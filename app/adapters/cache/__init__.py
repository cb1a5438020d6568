"""Response cache adapters.

The API depends on AbstractCache so the per-process in-memory store can be
replaced by a shared one (e.g., Redis) when running more than one instance.
"""
