"""logrelay core — framing, file tails and the supervisor event bus."""
