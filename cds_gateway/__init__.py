"""CDS Gateway: serves compiled CQL libraries and CDS Hooks services."""
