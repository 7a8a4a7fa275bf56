"""Core auth, RBAC and HTTP plumbing."""
