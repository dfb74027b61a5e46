"""Presentational building blocks: theme tokens and admin tool components."""
