"""Text and value processing helpers."""
