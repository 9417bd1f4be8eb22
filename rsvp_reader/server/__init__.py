"""HTTP API for tokenizing text and reading saved statistics."""
