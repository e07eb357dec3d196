"""Infrastructure layer: HTTP transport, response mapping, caching and imaging."""
