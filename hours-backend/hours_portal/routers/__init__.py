"""HTTP routers namespace."""
