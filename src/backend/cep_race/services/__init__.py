"""Provider clients — one HTTP call against one postal-code provider."""
