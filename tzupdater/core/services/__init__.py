"""Pipeline services — resolve, fetch, compile, activate."""
