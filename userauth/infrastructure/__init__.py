"""Infrastructure: persistence, security and outbound email implementations."""
