from .main import app, create_app, ctx_store, main

__all__ = ["app", "create_app", "main", "ctx_store"]
