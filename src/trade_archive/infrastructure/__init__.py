"""Infrastructure: partition storage, checkpoints, observability and clock."""
