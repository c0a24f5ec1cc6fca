"""Analysis services: resolution, token stream consumption and projection."""
