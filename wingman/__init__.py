"""Provider gateway for the Wingman interview assistant.

This package hides the choice between a hosted model (Gemini) and a local
Ollama server behind one object, so the capture/UI layer can ask for a
spoken answer without knowing which backend produced it.
"""
