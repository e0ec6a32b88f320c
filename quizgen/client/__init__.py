"""Client-side tools: HTTP client, status poller, credential store and CLI."""
