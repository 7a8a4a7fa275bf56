"""Application lifecycle helpers."""
