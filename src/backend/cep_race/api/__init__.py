"""HTTP routes exposing the provider race."""
