"""Infrastructure: backing-store adapters and their exceptions."""
