"""Event types exchanged between the session and the message pipeline."""
