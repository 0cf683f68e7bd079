"""HTTP-level plumbing shared by all routers."""
