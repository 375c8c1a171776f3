from .embed import embed_router

__all__ = ["embed_router"]
