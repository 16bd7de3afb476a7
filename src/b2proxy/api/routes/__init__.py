"""b2proxy API routers."""
