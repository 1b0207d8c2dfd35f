"""Domain core shared by the catalog gateway: models, store and services."""
