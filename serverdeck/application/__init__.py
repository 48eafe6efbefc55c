"""Application layer: composition root, shell commands and UI-facing ports."""
