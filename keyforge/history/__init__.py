"""KeyForge history: search, filters, updates and statistics over history records."""
