"""StyleScout: trend-aware fashion product discovery."""
