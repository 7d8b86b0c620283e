"""Storage layer: canonical schemas and the per-partition trade archive."""
