"""changekeeper: parse, promote, and re-serialize Keep a Changelog files."""
