"""Availability calendar: nested date -> shift -> slot mapping and its locks"""
