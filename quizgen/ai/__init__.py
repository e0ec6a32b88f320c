"""Quiz generation providers and prompts."""
