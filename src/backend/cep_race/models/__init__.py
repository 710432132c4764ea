"""Typed data flowing between provider clients, the race coordinator and callers."""
