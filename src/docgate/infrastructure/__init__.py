"""Infrastructure adapters: storage, audit logging, auth and HTTP."""
