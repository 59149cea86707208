"""Background tasks running alongside command dispatch."""
