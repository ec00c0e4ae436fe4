"""Service Layer — orchestration of the core around IO (impureim sandwich)."""
