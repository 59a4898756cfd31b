from shipquote.models.quote import CachedQuote

__all__ = ["CachedQuote"]
