"""Command line interface for inspecting a fit-vault document store."""
