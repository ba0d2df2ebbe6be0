"""Application layer - query building, fetching and the poll driver."""
