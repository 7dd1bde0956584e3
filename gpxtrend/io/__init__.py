"""Track and output file I/O (manifest, reader, writer)."""
