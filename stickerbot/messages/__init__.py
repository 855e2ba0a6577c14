"""Message normalization, classification and dispatch."""
