"""Shared constants across the application."""

# Signals counted by the two popularity variants
POPULAR_VIEW_SIGNALS = ("view",)
POPULAR_ENGAGEMENT_SIGNALS = ("view", "purchase")

# Recommendation contexts
CONTEXT_POPULAR = "popular"
CONTEXT_HISTORY = "history"
CONTEXT_FREQUENTLY_BOUGHT_TOGETHER = "frequently_bought_together"
CONTEXT_RELATED = "related"

# Batch sizes
INTERACTION_BATCH_SIZE = 100

# Activity history paging
DEFAULT_HISTORY_PAGE_SIZE = 50
MAX_HISTORY_PAGE_SIZE = 100
