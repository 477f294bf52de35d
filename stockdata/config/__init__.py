"""Environment-driven settings for data files, the HTTP server and logging."""
