"""Console helpers and input validators for the catalog CLI."""
