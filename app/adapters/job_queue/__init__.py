"""Background job queue adapters.

Email jobs are handed to a queue and processed off the request path. The
in-process implementation can later be replaced by a broker-backed one
behind the same interface.
"""
