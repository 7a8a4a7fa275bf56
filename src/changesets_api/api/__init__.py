"""HTTP API wiring: routers and per-request service factories."""
