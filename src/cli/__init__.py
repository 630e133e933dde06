"""Command line interface for saved quiz results."""
