"""Shell adapters — external executables."""
