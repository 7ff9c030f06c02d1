"""Cross-cutting infrastructure shared by the engine, players and CLI."""
