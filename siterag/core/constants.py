"""Application constants."""

# Content type values as produced by the extractor
HEADING_TYPES = ("h1", "h2", "h3", "h4")
BODY_TYPES = ("p", "li")
GRAPH_TYPES = HEADING_TYPES + BODY_TYPES

# Extraction
TEXT_SELECTORS = ("h1", "h2", "h3", "h4", "p", "li", "span")
MIN_TEXT_CHARS = 10
MAX_LABEL_CHARS = 200

# Content ids
ID_PREFIX_CHARS = 50

# Graph
CONTENT_LABEL = "Content"
USER_LABEL = "User"
USER_DEFINED_LABEL = "UserDefined"
RELATED_TO = "RELATED_TO"
DEFAULT_RELATIONSHIP = "related"

# Index
BM25_VECTOR = "text"
UNKNOWN_CATEGORY = "unknown"

# Context rendering
CONTEXT_PREVIEW_CHARS = 200
