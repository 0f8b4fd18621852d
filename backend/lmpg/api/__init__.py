"""HTTP layer — routers, request dependencies and global error handlers."""
