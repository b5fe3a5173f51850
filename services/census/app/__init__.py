"""Census parsing and arrangement application."""
