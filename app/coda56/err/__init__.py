"""Exceptions raised while talking to / decoding responses from the modem."""
