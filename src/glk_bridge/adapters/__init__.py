"""Host adapters that implement the presentation contract."""
