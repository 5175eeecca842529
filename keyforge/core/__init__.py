"""KeyForge core: data models, errors and the generation engine."""
