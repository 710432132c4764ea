"""Race coordination — first successful provider wins, bounded by a deadline."""
