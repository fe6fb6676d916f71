"""Domain Event definitions.

Represents significant occurrences in the request gateway (attempts,
retries, failures, successes) that listeners may react to.
"""
