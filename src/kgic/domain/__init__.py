"""Domain layer: playback, content, storage and identity."""
