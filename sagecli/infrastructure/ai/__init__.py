"""AI Model Implementations.

Contains specific clients/adapters for different AI providers (OpenAI, Groq, etc.),
each implementing the `AIModel` interface from the domain layer.
""" 