"""Terminal command line: catalog, input handling, rendering and entry points."""
