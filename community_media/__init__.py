"""Media asset management for the community CMS."""
