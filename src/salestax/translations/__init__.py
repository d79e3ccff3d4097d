"""Label catalogues shipped as package data."""
