"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the application to the outside world (AI provider APIs, the file
cache, configuration sources, the terminal) by implementing the interfaces
defined in the domain layer. Also hosts the request queue and retry executor.
"""
