"""HTTP gateway for the catalog and booking services."""
