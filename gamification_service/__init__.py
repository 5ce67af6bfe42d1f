"""Hearts and daily streak service for the learning app."""
