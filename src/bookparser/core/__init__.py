"""Format detection, per-format parsers and the parsing service."""
