"""Forwards node power status as CloudEvents and acks incoming ones."""
