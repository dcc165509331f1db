"""Management context HTTP interface: routers, schemas and dependency wiring."""
